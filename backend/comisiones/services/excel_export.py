"""
Export Excel du resume mensuel des commissions.
"""
from io import BytesIO

import openpyxl
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from openpyxl.utils import get_column_letter

from comisiones.core.roles import get_all_roles
from comisiones.schemas import MonthSummary

HEADERS = [
    "Tienda", "Fecha", "Presupuesto Tienda", "Ventas Tienda", "Cumplimiento Tienda %",
    "Empleado", "Rol", "Presupuesto", "Ventas", "Cumplimiento %", "Comisión %",
    "Comisión $", "Próxima venta",
]

MONEY_FMT = '#,##0.00'
PCT_FMT = '0.00%'


def build_month_workbook(summary: MonthSummary) -> bytes:
    """
    Construit le classeur .xlsx d'un MonthSummary.

    Feuille 1: une ligne par employe, sous-total par tienda, total general.
    Feuille 2: commissions par role.
    Les valeurs restent numeriques; seuls les formats de cellule changent.
    """
    wb = openpyxl.Workbook()

    header_font = Font(bold=True, color="FFFFFF", size=11)
    header_fill = PatternFill(start_color="1F4E79", end_color="1F4E79", fill_type="solid")
    subtotal_fill = PatternFill(start_color="D6E4F0", end_color="D6E4F0", fill_type="solid")
    thin_border = Border(
        left=Side(style='thin'), right=Side(style='thin'),
        top=Side(style='thin'), bottom=Side(style='thin')
    )

    # --- Feuille 1 : detail ---
    ws = wb.active
    ws.title = "Comisiones"

    ws.merge_cells('A1:M1')
    ws['A1'] = f"COMISIONES {summary.month}"
    ws['A1'].font = Font(bold=True, size=14, color="1F4E79")

    row = 3
    for col, h in enumerate(HEADERS, 1):
        cell = ws.cell(row=row, column=col, value=h)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center")
        cell.border = thin_border

    # Cumplimiento stocke en % (120.0) -> fraction pour le format pourcentage
    row = 4
    for store in summary.stores:
        for employee in store.employees:
            values = [
                (store.store, None),
                (employee.date, None),
                (store.total_budget, MONEY_FMT),
                (store.total_sales, MONEY_FMT),
                (store.compliance_store_pct / 100, PCT_FMT),
                (employee.name, None),
                (employee.role.value, None),
                (employee.budget, MONEY_FMT),
                (employee.sales, MONEY_FMT),
                (employee.compliance_pct / 100, PCT_FMT),
                (employee.commission_pct, PCT_FMT),
                (employee.commission_amount, MONEY_FMT),
                (employee.next_tier_gap_amount, MONEY_FMT),
            ]
            for col, (value, fmt) in enumerate(values, 1):
                cell = ws.cell(row=row, column=col, value=value)
                cell.border = thin_border
                if fmt:
                    cell.number_format = fmt
            row += 1

        ws.cell(row=row, column=1, value=f"TOTAL {store.store}").font = Font(bold=True)
        for col in range(1, len(HEADERS) + 1):
            ws.cell(row=row, column=col).fill = subtotal_fill
            ws.cell(row=row, column=col).border = thin_border
        total_cell = ws.cell(row=row, column=12, value=store.total_commissions)
        total_cell.number_format = MONEY_FMT
        total_cell.font = Font(bold=True)
        row += 1

    ws.cell(row=row, column=1, value="TOTAL GENERAL").font = Font(bold=True)
    grand_cell = ws.cell(row=row, column=12, value=summary.total_commissions)
    grand_cell.number_format = MONEY_FMT
    grand_cell.font = Font(bold=True)

    for col, width in enumerate([18, 12, 18, 18, 12, 28, 16, 16, 16, 12, 10, 14, 14], 1):
        ws.column_dimensions[get_column_letter(col)].width = width

    # --- Feuille 2 : par role ---
    ws_roles = wb.create_sheet("Por rol")
    for col, h in enumerate(["Rol", "Comisión $"], 1):
        cell = ws_roles.cell(row=1, column=col, value=h)
        cell.font = header_font
        cell.fill = header_fill
        cell.border = thin_border

    for i, role in enumerate(get_all_roles(), 2):
        ws_roles.cell(row=i, column=1, value=role.value).border = thin_border
        amount = ws_roles.cell(row=i, column=2, value=summary.commissions_by_role.get(role, 0.0))
        amount.number_format = MONEY_FMT
        amount.border = thin_border

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
