"""
Data models for document generation.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from .utils.formatting import (
    competence_label,
    month_label,
    parse_registration_date,
    to_cents,
    to_decimal,
)


class ReportType(Enum):
    """Kinds of documents the engine produces."""
    PAYSLIP = "holerite"
    REVENUE = "faturamento"
    REVENUE_BATCH = "faturamento_lote"

    @property
    def merge_output(self) -> bool:
        """Whether a batch run concatenates every subject into one file."""
        return self is not ReportType.REVENUE

    @property
    def template_name(self) -> Optional[str]:
        """Logical name of the fillable template, if the type has one."""
        if self is ReportType.PAYSLIP:
            return "holerite-template.pdf"
        return None

    @property
    def file_prefix(self) -> str:
        if self is ReportType.PAYSLIP:
            return "Holerite"
        return "Faturamento"


class RenderStrategy(Enum):
    TEMPLATE = "template"
    FREEHAND = "freehand"


class BatchStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    PARTIALLY_FAILED = "partially_failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Subject:
    """A registered business (MEI) a document is generated for."""
    legal_name: str
    trade_name: str
    tax_id: str
    address: str = ""
    registration_date: Any = None  # DD/MM/YYYY string, ISO string or date
    status: str = "Ativo"
    id: str = ""

    @property
    def key(self) -> str:
        """Stable lookup key: record id, else tax id."""
        return self.id or self.tax_id

    @property
    def display_name(self) -> str:
        """Name printed on documents: legal name, else trade name."""
        return self.legal_name or self.trade_name

    @property
    def file_identifier(self) -> str:
        """Name plus CNPJ digits (record id when there is no CNPJ)."""
        digits = re.sub(r"\D", "", self.tax_id or "")
        name = self.trade_name or self.legal_name
        return "_".join(part for part in (name, digits or self.id) if part)

    @property
    def is_active(self) -> bool:
        return self.status == "Ativo"

    def opened_on(self) -> Optional[date]:
        return parse_registration_date(self.registration_date)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Subject":
        """Build from a record store document (clientes collection)."""
        return cls(
            legal_name=record.get("razaoSocial") or "",
            trade_name=record.get("nomeFantasia") or "",
            tax_id=record.get("cnpj") or "",
            address=record.get("enderecoCompleto") or "",
            registration_date=record.get("dataAbertura"),
            status=record.get("status") or "Ativo",
            id=str(record.get("id") or ""),
        )


@dataclass(frozen=True, order=True)
class MonthKey:
    """A calendar month."""
    year: int
    month: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"Invalid month: {self.month}")

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def label(self) -> str:
        return month_label(self.year, self.month)

    @property
    def competence(self) -> str:
        return competence_label(self.year, self.month)

    @property
    def start(self) -> date:
        return date(self.year, self.month, 1)

    @classmethod
    def from_date(cls, value: date) -> "MonthKey":
        return cls(value.year, value.month)

    @classmethod
    def from_key(cls, key: str) -> "MonthKey":
        """Parse YYYY-MM (also accepts MM/YYYY)."""
        if "/" in key:
            month, year = key.split("/", 1)
        else:
            year, month = key.split("-")[:2]
        return cls(int(year), int(month))

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class PeriodWindow:
    """Strictly increasing sequence of months to report on."""
    months: Tuple[MonthKey, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "months", tuple(self.months))
        for previous, current in zip(self.months, self.months[1:]):
            if not previous < current:
                raise ValueError(f"Months must be strictly increasing: {previous} >= {current}")

    def __len__(self) -> int:
        return len(self.months)

    def __iter__(self) -> Iterator[MonthKey]:
        return iter(self.months)

    def __bool__(self) -> bool:
        return bool(self.months)

    @property
    def first(self) -> Optional[MonthKey]:
        return self.months[0] if self.months else None

    @property
    def last(self) -> Optional[MonthKey]:
        return self.months[-1] if self.months else None

    @property
    def keys(self) -> List[str]:
        return [m.key for m in self.months]

    @property
    def labels(self) -> List[str]:
        return [m.label for m in self.months]

    @property
    def range_label(self) -> str:
        """File-name friendly span, e.g. nov/25-a-jan/26."""
        if not self.months:
            return ""
        if len(self.months) == 1:
            return self.months[0].label
        return f"{self.months[0].label}-a-{self.months[-1].label}"

    @classmethod
    def single(cls, month: MonthKey) -> "PeriodWindow":
        return cls((month,))


@dataclass(frozen=True)
class MonetaryLine:
    """A labelled non-negative amount with two-digit precision."""
    label: str
    amount: Decimal = Decimal("0.00")

    def __post_init__(self):
        amount = to_cents(self.amount)
        if amount < 0:
            raise ValueError(f"Negative amount for '{self.label}': {amount}")
        object.__setattr__(self, "amount", amount)


@dataclass(frozen=True)
class RevenueEntry:
    """One financial entry as supplied by the record store."""
    entry_date: str  # YYYY-MM-DD
    amount: Decimal
    kind: str = "Receita"

    def __post_init__(self):
        object.__setattr__(self, "amount", to_decimal(self.amount))

    @property
    def month_key(self) -> Optional[str]:
        return self.entry_date[:7] if self.entry_date and len(self.entry_date) >= 7 else None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "RevenueEntry":
        """Build from a financeiro document."""
        return cls(
            entry_date=str(record.get("data") or ""),
            amount=record.get("valor") or 0,
            kind=record.get("tipo") or "Receita",
        )


@dataclass(frozen=True)
class ProLaboreValues:
    """Monthly pro-labore figures for one subject."""
    base: Decimal
    inss_rate: Decimal
    inss_amount: Decimal
    net_amount: Decimal

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ProLaboreValues":
        """Build from a pro_labores document."""
        return cls(
            base=to_cents(record.get("salarioMinimo") or 0),
            inss_rate=to_decimal(record.get("inssPerc") or 0),
            inss_amount=to_cents(record.get("valorInss") or 0),
            net_amount=to_cents(record.get("valorLiquido") or 0),
        )


@dataclass(frozen=True)
class Signer:
    """Accountant who signs generated documents."""
    name: str = ""
    registration_code: str = ""  # CRC
    signature_url: Optional[str] = None
    signature_image: Optional[bytes] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Signer":
        """Build from a contador_perfil document."""
        return cls(
            name=record.get("nomeCompleto") or "",
            registration_code=record.get("crc") or "",
            signature_url=record.get("assinaturaUrl") or None,
        )


FinancialData = Union[ProLaboreValues, Sequence[RevenueEntry]]


@dataclass(frozen=True)
class RenderRequest:
    """Everything a renderer needs to draw one document."""
    report_type: ReportType
    subject: Subject
    period: PeriodWindow
    lines: Tuple[MonetaryLine, ...] = ()
    signer: Optional[Signer] = None
    issued_on: date = field(default_factory=date.today)
    pro_labore: Optional[ProLaboreValues] = None

    @property
    def total(self) -> Decimal:
        return sum((line.amount for line in self.lines), Decimal("0.00"))

    @property
    def signature_image(self) -> Optional[bytes]:
        return self.signer.signature_image if self.signer else None


@dataclass(frozen=True)
class RenderedDocument:
    """A finished PDF and how it was produced."""
    content: bytes
    page_count: int
    strategy: RenderStrategy
    skipped_fields: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DocumentArtifact:
    """Bytes plus suggested file name, handed to the host for saving."""
    filename: str
    content: bytes
    page_count: int = 1
    strategy: Optional[RenderStrategy] = None

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class BatchFailure:
    subject: Subject
    reason: str


@dataclass
class BatchResult:
    """Outcome of a batch run."""
    report_type: ReportType
    total: int
    status: BatchStatus = BatchStatus.IDLE
    done: int = 0
    succeeded: List[Tuple[Subject, DocumentArtifact]] = field(default_factory=list)
    failed: List[BatchFailure] = field(default_factory=list)
    merged: Optional[DocumentArtifact] = None

    @property
    def succeeded_count(self) -> int:
        return len(self.succeeded)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def artifacts(self) -> List[DocumentArtifact]:
        """Deliverables: the merged file, or one per subject."""
        if self.merged is not None:
            return [self.merged]
        return [artifact for _, artifact in self.succeeded]

    def summary(self) -> str:
        return (f"{self.status.value}: {self.succeeded_count} succeeded, "
                f"{self.failed_count} failed, {self.done}/{self.total} processed")
