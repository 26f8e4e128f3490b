from datetime import datetime

from openpyxl import load_workbook

from pedidobot.core.orders import (
    CustomerInfo,
    Order,
    OrderStatus,
    PaymentInfo,
    PeriodSales,
    ProductInfo,
    SalesSummary,
    TopProduct,
    ledger_exporter,
)


def make_order(status=OrderStatus.NEW):
    return Order(
        id="1a2b3c4d-0000-4000-8000-000000000000",
        created_at=datetime(2024, 5, 6, 9, 30),
        status=status,
        sender="1001",
        customer=CustomerInfo(
            name="Ana Pérez",
            id_number="1020304050",
            phone="3001234567",
            address="Calle 1",
            neighborhood="Centro",
            city="Bogotá",
        ),
        product=ProductInfo(id="101", name="Producto X", price_minor=4_500_000),
        payment=PaymentInfo(product_price_minor=4_500_000, delivery_cost_minor=800_000),
        attended_by="Marta",
    )


def test_export_orders_sheet(tmp_path):
    path = ledger_exporter.export([make_order(), make_order(OrderStatus.CANCELLED)], output_dir=tmp_path)

    assert path.parent == tmp_path
    assert path.name.startswith("pedidos_") and path.suffix == ".xlsx"

    wb = load_workbook(path)
    assert wb.sheetnames == ["Pedidos"]
    ws = wb["Pedidos"]
    assert ws["A1"].value == "Pedido"
    assert ws["N1"].value == "Total"
    assert ws["A2"].value == "#1A2B3C4D"
    assert ws["B2"].value == "06/05/2024 09:30"
    assert ws["C2"].value == "Nuevo"
    assert ws["C3"].value == "Cancelado"
    assert ws["D2"].value == "Ana Pérez"
    assert ws["L2"].value == 45000
    assert ws["M2"].value == 8000
    assert ws["N2"].value == 53000
    assert ws["O2"].value == "Marta"
    assert ws.max_row == 3


def test_export_summary_sheet(tmp_path):
    summary = SalesSummary(
        count=2,
        revenue_minor=5_300_000,
        product_revenue_minor=4_500_000,
        delivery_revenue_minor=800_000,
        avg_order_value_minor=5_300_000.0,
    )
    summary.count_by_status[OrderStatus.NEW] = 1
    summary.count_by_status[OrderStatus.CANCELLED] = 1

    path = ledger_exporter.export(
        [make_order()],
        summary=summary,
        top_products=[TopProduct(id="101", name="Producto X", count=1, revenue_minor=4_500_000)],
        periods=[PeriodSales(period="2024-05-06", count=1, revenue_minor=5_300_000)],
        output_dir=tmp_path,
    )

    ws = load_workbook(path)["Resumen"]
    values = {
        row[0]: row[1]
        for row in ws.iter_rows(min_col=1, max_col=2, values_only=True)
        if row[0] is not None
    }
    assert values["Pedidos"] == 2
    assert values["Ingresos totales"] == 53000
    assert values["Ticket promedio"] == 53000
    assert values["Nuevo"] == 1
    assert values["Cancelado"] == 1
    assert values["Producto X (101)"] == 1
    assert values["2024-05-06"] == 1
