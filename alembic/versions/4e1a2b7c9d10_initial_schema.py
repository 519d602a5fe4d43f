"""Initial schema: registries, categories and the partitioned transaction table.

Revision ID: 4e1a2b7c9d10
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "4e1a2b7c9d10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", sa.BigInteger(), sa.Identity(), primary_key=True)


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("name", sa.String(length=255), nullable=False),
        _created_at(),
    )
    op.create_table(
        "bank",
        _id(),
        sa.Column("name", sa.String(length=100), nullable=False, unique=True),
        _created_at(),
    )
    op.create_table(
        "bank_import_method",
        _id(),
        sa.Column("bank_id", sa.BigInteger(), sa.ForeignKey("bank.id", ondelete="CASCADE"), nullable=False),
        sa.Column("import_method", sa.String(length=20), nullable=False),
        _created_at(),
        sa.UniqueConstraint("bank_id", "import_method", name="uq_bank_import_method"),
    )
    op.create_index("ix_bank_import_method_bank_id", "bank_import_method", ["bank_id"])
    op.create_table(
        "bank_header",
        _id(),
        sa.Column("bank_id", sa.BigInteger(), sa.ForeignKey("bank.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("required", sa.Boolean(), server_default=sa.false(), nullable=False),
        _created_at(),
        sa.UniqueConstraint("bank_id", "name", name="uq_bank_header_name"),
    )
    op.create_index("ix_bank_header_bank_id", "bank_header", ["bank_id"])
    op.create_table(
        "bank_header_mapping",
        _id(),
        sa.Column(
            "header_id", sa.BigInteger(), sa.ForeignKey("bank_header.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("transaction_field", sa.String(length=30), nullable=False),
        _created_at(),
        sa.UniqueConstraint("header_id", "transaction_field", name="uq_header_transaction_field"),
    )
    op.create_index("ix_bank_header_mapping_header_id", "bank_header_mapping", ["header_id"])
    op.create_table(
        "category",
        _id(),
        sa.Column("name", sa.String(length=100), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        _created_at(),
    )
    op.create_table(
        "category_keyword",
        _id(),
        sa.Column(
            "category_id", sa.BigInteger(), sa.ForeignKey("category.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("name", sa.String(length=255), nullable=False, unique=True),
        _created_at(),
    )
    op.create_index("ix_category_keyword_category_id", "category_keyword", ["category_id"])

    # Partitions (transaction_YYYY_MM) are created by the application.
    op.execute(
        sa.text(
            """
            CREATE TABLE "transaction" (
                id BIGINT GENERATED BY DEFAULT AS IDENTITY,
                transaction_date TIMESTAMPTZ NOT NULL,
                bank_id BIGINT NOT NULL REFERENCES bank (id),
                user_id BIGINT NOT NULL REFERENCES users (id),
                external_id VARCHAR(255) NOT NULL,
                amount VARCHAR(64) NOT NULL,
                category_id BIGINT NOT NULL REFERENCES category (id),
                description TEXT NOT NULL DEFAULT '',
                type VARCHAR(20) NOT NULL DEFAULT 'unspecified',
                created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
                PRIMARY KEY (id, transaction_date),
                CONSTRAINT uniq_transaction_external UNIQUE (bank_id, external_id, transaction_date)
            ) PARTITION BY RANGE (transaction_date)
            """
        )
    )
    op.create_index("ix_transaction_user_id_date", "transaction", ["user_id", "transaction_date"])

    _seed()


def _seed() -> None:
    category = sa.table(
        "category",
        sa.column("id", sa.BigInteger),
        sa.column("name", sa.String),
        sa.column("description", sa.Text),
    )
    # Id 1 is the uncategorized sentinel.
    op.bulk_insert(
        category,
        [
            {"id": 1, "name": "Uncategorized", "description": "No keyword matched"},
            {"id": 2, "name": "Transfer", "description": "Moves between own accounts"},
        ],
    )
    op.execute(sa.text("SELECT setval(pg_get_serial_sequence('category', 'id'), 2)"))

    keyword = sa.table("category_keyword", sa.column("category_id", sa.BigInteger), sa.column("name", sa.String))
    op.bulk_insert(
        keyword,
        [
            {"category_id": 2, "name": "transfer"},
            {"category_id": 2, "name": "payment received"},
        ],
    )

    bank = sa.table("bank", sa.column("id", sa.BigInteger), sa.column("name", sa.String))
    op.bulk_insert(
        bank,
        [
            {"id": 1, "name": "Monzo"},
            {"id": 2, "name": "American express"},
            {"id": 3, "name": "Revolut"},
        ],
    )
    op.execute(sa.text("SELECT setval(pg_get_serial_sequence('bank', 'id'), 3)"))

    import_method = sa.table(
        "bank_import_method", sa.column("bank_id", sa.BigInteger), sa.column("import_method", sa.String)
    )
    op.bulk_insert(
        import_method,
        [
            {"bank_id": 1, "import_method": "api"},
            {"bank_id": 2, "import_method": "csv"},
            {"bank_id": 3, "import_method": "csv"},
        ],
    )

    header = sa.table(
        "bank_header",
        sa.column("id", sa.BigInteger),
        sa.column("bank_id", sa.BigInteger),
        sa.column("name", sa.String),
        sa.column("required", sa.Boolean),
    )
    mapping = sa.table(
        "bank_header_mapping", sa.column("header_id", sa.BigInteger), sa.column("transaction_field", sa.String)
    )
    headers = [
        # (id, bank_id, name, required, fields)
        (1, 2, "Date", True, ["date"]),
        (2, 2, "Description", True, ["description", "category"]),
        (3, 2, "Amount", True, ["amount"]),
        (4, 2, "Reference", False, ["external_id"]),
        (5, 2, "Category", False, ["category"]),
        (6, 3, "Started Date", True, ["date"]),
        (7, 3, "Description", True, ["description", "category"]),
        (8, 3, "Amount", True, ["amount"]),
        (9, 3, "Type", False, ["category"]),
    ]
    op.bulk_insert(
        header,
        [{"id": h[0], "bank_id": h[1], "name": h[2], "required": h[3]} for h in headers],
    )
    op.execute(sa.text("SELECT setval(pg_get_serial_sequence('bank_header', 'id'), 9)"))
    op.bulk_insert(
        mapping,
        [{"header_id": h[0], "transaction_field": f} for h in headers for f in h[4]],
    )


def downgrade() -> None:
    op.execute(sa.text('DROP TABLE IF EXISTS "transaction" CASCADE'))
    op.drop_table("category_keyword")
    op.drop_table("category")
    op.drop_table("bank_header_mapping")
    op.drop_table("bank_header")
    op.drop_table("bank_import_method")
    op.drop_table("bank")
    op.drop_table("users")
