"""Default reference data inserted into a freshly created database."""

import logging
import uuid
from datetime import datetime

from sqlalchemy.orm import Session

from kakeibo.database.models import Category, PaymentMethod, IncomeSource

logger = logging.getLogger(__name__)


# (major name, minor names); a major without minors becomes one category
DEFAULT_CATEGORIES = [
    ("食費", ["外食", "スーパー", "コンビニ"]),
    ("日用品", ["生活用品"]),
    ("交通", ["電車", "ガソリン"]),
    ("娯楽", ["レジャー", "サブスク"]),
    ("医療", ["病院", "薬"]),
    ("教育", ["書籍", "習い事"]),
    ("住居", ["家賃", "光熱費"]),
    ("その他", []),
]

DEFAULT_PAYMENT_METHODS = ["現金", "クレジットカード", "電子マネー", "QR決済", "振込", "未設定"]

DEFAULT_INCOME_SOURCES = ["給与", "副収入", "臨時収入"]


def _seed_categories(session: Session, now: datetime) -> int:
    if session.query(Category).count() > 0:
        return 0

    rows = []
    for major, minors in DEFAULT_CATEGORIES:
        for minor in minors or [None]:
            rows.append(
                Category(
                    id=str(uuid.uuid4()),
                    major_name=major,
                    minor_name=minor,
                    sort_order=len(rows),
                    is_active=True,
                    created_at=now,
                    updated_at=now,
                )
            )
    session.add_all(rows)
    return len(rows)


def _seed_named(session: Session, model, names: list[str], now: datetime) -> int:
    if session.query(model).count() > 0:
        return 0

    session.add_all(
        model(
            id=str(uuid.uuid4()),
            name=name,
            sort_order=index,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        for index, name in enumerate(names)
    )
    return len(names)


def seed_defaults(session: Session, now: datetime) -> dict[str, int]:
    """Insert default categories, payment methods and income sources.

    Each table is only seeded while it is empty. The caller commits.

    Returns:
        Number of rows inserted per table name
    """
    counts = {
        Category.__tablename__: _seed_categories(session, now),
        PaymentMethod.__tablename__: _seed_named(session, PaymentMethod, DEFAULT_PAYMENT_METHODS, now),
        IncomeSource.__tablename__: _seed_named(session, IncomeSource, DEFAULT_INCOME_SOURCES, now),
    }
    logger.info("Seeded default reference data: %s", counts)
    return counts
