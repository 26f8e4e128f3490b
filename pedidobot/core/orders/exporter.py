"""
Export ledger orders and sales figures to XLSX.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, Border, Side, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from pedidobot.config import settings
from pedidobot.core.orders.models import STATUS_LABELS, Order, PeriodSales, SalesSummary, TopProduct

logger = logging.getLogger(__name__)


def _units(amount_minor: Optional[int]) -> Optional[float]:
    """Minor units to currency units for numeric cells."""
    return None if amount_minor is None else amount_minor / 100


class LedgerExporter:
    """Export orders to an XLSX report."""

    # Styles
    HEADER_FONT = Font(bold=True, size=14)
    SUBHEADER_FONT = Font(bold=True, size=11)

    HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
    HEADER_FONT_WHITE = Font(bold=True, size=11, color="FFFFFF")

    ALT_ROW_FILL = PatternFill(start_color="D9E2F3", end_color="D9E2F3", fill_type="solid")

    THIN_BORDER = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    CENTER_ALIGN = Alignment(horizontal='center', vertical='center')
    LEFT_ALIGN = Alignment(horizontal='left', vertical='center')
    RIGHT_ALIGN = Alignment(horizontal='right', vertical='center')

    MONEY_FORMAT = '#,##0'

    ORDER_COLUMNS = [
        ("Pedido", 12),
        ("Fecha", 17),
        ("Estado", 13),
        ("Cliente", 28),
        ("Identificación", 16),
        ("Teléfono", 16),
        ("Dirección", 32),
        ("Barrio", 18),
        ("Ciudad", 16),
        ("Código", 12),
        ("Producto", 30),
        ("Precio", 13),
        ("Domicilio", 13),
        ("Total", 13),
        ("Atendido por", 18),
    ]

    def export(
        self,
        orders: Sequence[Order],
        summary: Optional[SalesSummary] = None,
        top_products: Sequence[TopProduct] = (),
        periods: Sequence[PeriodSales] = (),
        output_dir: Optional[Path] = None,
    ) -> Path:
        """
        Export orders to XLSX file.

        Args:
            orders: Orders to list, one per row
            summary: Totals for the summary sheet
            top_products: Best sellers for the summary sheet
            periods: Sales per period for the summary sheet
            output_dir: Directory for output file (default: data/exports/)

        Returns:
            Path to created XLSX file
        """
        if output_dir is None:
            output_dir = settings.exports_dir

        output_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = output_dir / f"pedidos_{timestamp}.xlsx"

        wb = Workbook()
        ws = wb.active
        ws.title = "Pedidos"
        self._write_orders(ws, orders)

        if summary is not None:
            self._write_summary(wb.create_sheet("Resumen"), summary, top_products, periods)

        wb.save(filepath)
        logger.info(f"Exported {len(orders)} orders to {filepath}")

        return filepath

    def _write_header_row(self, ws: Worksheet, row: int, headers: Sequence[str]) -> None:
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=header)
            cell.font = self.HEADER_FONT_WHITE
            cell.fill = self.HEADER_FILL
            cell.border = self.THIN_BORDER
            cell.alignment = self.CENTER_ALIGN

    def _write_orders(self, ws: Worksheet, orders: Sequence[Order]) -> None:
        for col, (_, width) in enumerate(self.ORDER_COLUMNS, 1):
            ws.column_dimensions[get_column_letter(col)].width = width

        self._write_header_row(ws, 1, [title for title, _ in self.ORDER_COLUMNS])
        ws.freeze_panes = "A2"

        for i, order in enumerate(orders, 1):
            row = i + 1
            values = [
                order.order_number,
                order.created_at.strftime("%d/%m/%Y %H:%M"),
                STATUS_LABELS[order.status],
                order.customer.name,
                order.customer.id_number,
                order.customer.phone,
                order.customer.address,
                order.customer.neighborhood,
                order.customer.city,
                order.product.id,
                order.product.name,
                _units(order.payment.product_price_minor),
                _units(order.payment.delivery_cost_minor),
                _units(order.payment.total_minor),
                order.attended_by,
            ]

            for col, value in enumerate(values, 1):
                cell = ws.cell(row=row, column=col, value=value)
                cell.border = self.THIN_BORDER
                if 12 <= col <= 14:
                    cell.alignment = self.RIGHT_ALIGN
                    cell.number_format = self.MONEY_FORMAT
                else:
                    cell.alignment = self.LEFT_ALIGN

                # Alternate row coloring
                if i % 2 == 0:
                    cell.fill = self.ALT_ROW_FILL

    def _write_summary(
        self,
        ws: Worksheet,
        summary: SalesSummary,
        top_products: Sequence[TopProduct],
        periods: Sequence[PeriodSales],
    ) -> None:
        ws.column_dimensions['A'].width = 30
        ws.column_dimensions['B'].width = 18
        ws.column_dimensions['C'].width = 18

        row = 1

        # === TOTALS ===
        ws.merge_cells(f'A{row}:C{row}')
        cell = ws.cell(row=row, column=1, value=f"RESUMEN DE VENTAS {settings.business_name}")
        cell.font = self.HEADER_FONT
        cell.alignment = self.CENTER_ALIGN
        row += 2

        totals = [
            ("Pedidos", summary.count, None),
            ("Ingresos totales", _units(summary.revenue_minor), self.MONEY_FORMAT),
            ("Ingresos por productos", _units(summary.product_revenue_minor), self.MONEY_FORMAT),
            ("Ingresos por domicilios", _units(summary.delivery_revenue_minor), self.MONEY_FORMAT),
            ("Ticket promedio", _units(summary.avg_order_value_minor), self.MONEY_FORMAT),
        ]
        for label, value, number_format in totals:
            ws.cell(row=row, column=1, value=label).font = self.SUBHEADER_FONT
            cell = ws.cell(row=row, column=2, value=value)
            cell.alignment = self.RIGHT_ALIGN
            if number_format:
                cell.number_format = number_format
            row += 1
        row += 1

        # === STATUS ===
        ws.cell(row=row, column=1, value="PEDIDOS POR ESTADO:").font = self.SUBHEADER_FONT
        row += 1
        for status, count in summary.count_by_status.items():
            ws.cell(row=row, column=1, value=STATUS_LABELS[status])
            ws.cell(row=row, column=2, value=count).alignment = self.RIGHT_ALIGN
            row += 1
        row += 1

        # === TOP PRODUCTS ===
        if top_products:
            ws.cell(row=row, column=1, value="PRODUCTOS MÁS VENDIDOS:").font = self.SUBHEADER_FONT
            row += 1
            self._write_header_row(ws, row, ["Producto", "Pedidos", "Ingresos"])
            row += 1
            for product in top_products:
                ws.cell(row=row, column=1, value=f"{product.name or product.id} ({product.id})").border = self.THIN_BORDER
                cell = ws.cell(row=row, column=2, value=product.count)
                cell.border = self.THIN_BORDER
                cell.alignment = self.RIGHT_ALIGN
                cell = ws.cell(row=row, column=3, value=_units(product.revenue_minor))
                cell.border = self.THIN_BORDER
                cell.number_format = self.MONEY_FORMAT
                row += 1
            row += 1

        # === PERIODS ===
        if periods:
            ws.cell(row=row, column=1, value="VENTAS POR PERIODO:").font = self.SUBHEADER_FONT
            row += 1
            self._write_header_row(ws, row, ["Periodo", "Pedidos", "Ingresos"])
            row += 1
            for period in periods:
                ws.cell(row=row, column=1, value=period.period).border = self.THIN_BORDER
                cell = ws.cell(row=row, column=2, value=period.count)
                cell.border = self.THIN_BORDER
                cell.alignment = self.RIGHT_ALIGN
                cell = ws.cell(row=row, column=3, value=_units(period.revenue_minor))
                cell.border = self.THIN_BORDER
                cell.number_format = self.MONEY_FORMAT
                row += 1


# Singleton instance
ledger_exporter = LedgerExporter()
