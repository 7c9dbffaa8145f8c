"""ORM Models — SQLAlchemy declarative models for ledger and registry state.

Invariants:
    - All models inherit from Base (db/base.py)
    - Every table is keyed by donor address or token id; there is no aggregate root

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all
      or alembic autogenerate runs
"""

from charity_ledger.models.registry_state import RegistryState  # noqa: F401
from charity_ledger.models.token import Token  # noqa: F401
from charity_ledger.models.donor_total import DonorTotal  # noqa: F401
from charity_ledger.models.invoice_token import InvoiceToken  # noqa: F401
from charity_ledger.models.donation_record import DonationRecord  # noqa: F401
from charity_ledger.models.donor_roster_entry import DonorRosterEntry  # noqa: F401
from charity_ledger.models.ledger_event import LedgerEvent  # noqa: F401
