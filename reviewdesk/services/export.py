from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date

import pandas as pd

from reviewdesk.schemas.reviews import CanonicalReview

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "ID",
    "Дата",
    "Пользователь",
    "Ресторан",
    "Рейтинг",
    "Комментарий",
    "Статус ответа",
    "Ответ",
]

# Excel opens this layout directly in a ru-RU locale
CSV_DELIMITER = ";"
BOM = "\ufeff"


def _rating_label(rating: float) -> str:
    return f"{rating:g}"


def _row(review: CanonicalReview) -> list:
    return [
        "" if review.id is None else review.id,
        review.created_at_display,
        review.author_name,
        review.restaurant_name,
        _rating_label(review.rating),
        review.text,
        "Отвечено" if review.responded else "Без ответа",
        review.response,
    ]


def reviews_to_frame(reviews: Iterable[CanonicalReview]) -> pd.DataFrame:
    return pd.DataFrame([_row(r) for r in reviews], columns=EXPORT_COLUMNS)


def reviews_to_csv(reviews: Iterable[CanonicalReview]) -> str:
    df = reviews_to_frame(reviews)
    body = df.to_csv(sep=CSV_DELIMITER, index=False, lineterminator="\r\n")
    logger.info("Exported %s reviews to CSV", len(df))
    return BOM + body


def export_filename(day: date, prefix: str = "reviews_export") -> str:
    return f"{prefix}_{day:%Y-%m-%d}.csv"
