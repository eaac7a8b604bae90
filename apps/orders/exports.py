# apps/orders/exports.py
import csv
import io
import logging
from typing import Dict, Iterable, List

from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.utils import timezone
from openpyxl import Workbook

from .models import Order, OrderItemFeedback

logger = logging.getLogger("app")

EXPORT_DIR = "exports"
HEADER = ["Код", "Артикул", "Товар", "Цвет", "Цена коробки", "Кол-во", "Сумма", "Отказ"]


def _rows(order: Order) -> List[list]:
    rows = []
    for it in order.items.prefetch_related("feedbacks").all():
        refused = any(f.feedback_type in OrderItemFeedback.REFUSAL_TYPES for f in it.feedbacks.all())
        rows.append([
            it.item_code,
            it.article,
            it.name,
            it.color or "",
            float(it.price_box or 0),
            it.qty,
            float(it.total),
            "Да" if refused else "",
        ])
    return rows


def _title(order: Order) -> str:
    created = order.created_at.astimezone(timezone.get_current_timezone()).strftime("%d.%m.%y") if order.created_at else ""
    return f"{created} заказ № {order.order_number} клиент: {order.full_name or order.phone}"


def build_xlsx(order: Order) -> bytes:
    """Workbook with the order header, one row per line and the total."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Заказ"
    ws.append([_title(order)])
    ws.append([f"ТК: {order.transport_company}", f"Адрес: {order.address}"])
    ws.append([])
    ws.append(HEADER)
    for row in _rows(order):
        ws.append(row)
    ws.append(["", "", "", "", "", "Всего", float(order.total or 0), ""])

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def build_csv(order: Order) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=";")
    writer.writerow(HEADER)
    writer.writerows(_rows(order))
    writer.writerow(["", "", "", "", "", "Всего", float(order.total or 0), ""])
    # utf-8-sig so Excel opens cyrillic correctly
    return buffer.getvalue().encode("utf-8-sig")


BUILDERS = {
    "xlsx": build_xlsx,
    "csv": build_csv,
}


def export_order(order: Order, formats: Iterable[str]) -> List[Dict[str, str]]:
    """
    Produce every requested format independently; a failing format is reported
    in its own entry and does not stop the others.
    """
    results = []
    for fmt in formats:
        builder = BUILDERS.get(fmt)
        if builder is None:
            results.append({"format": fmt, "error": "Unsupported format"})
            continue
        try:
            payload = builder(order)
            name = default_storage.save(
                f"{EXPORT_DIR}/order_{order.order_number}.{fmt}",
                ContentFile(payload),
            )
        except Exception as e:
            logger.exception("Export %s of order %s failed", fmt, order.order_number)
            results.append({"format": fmt, "error": str(e)})
            continue
        results.append({"format": fmt, "file": name, "url": default_storage.url(name)})

    logger.info(
        "Order %s exported: %s",
        order.order_number,
        ", ".join(f"{r['format']}={'ok' if 'file' in r else 'error'}" for r in results),
    )
    return results
