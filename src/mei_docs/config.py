"""
Configuration for document generation.

GenerationConfig holds runtime settings (optionally read from the
environment / .env file). LayoutConfig holds the fixed page geometry and is
passed explicitly into every renderer.
"""

import logging
import os
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


@dataclass(frozen=True)
class LayoutConfig:
    """Page geometry, fonts and fixed offsets (points, origin bottom-left)."""
    page_size: Tuple[float, float] = (595.0, 842.0)  # A4
    margin_x: float = 48.0
    top_offset: float = 40.0

    font_regular: str = "Helvetica"
    font_bold: str = "Helvetica-Bold"
    font_oblique: str = "Helvetica-Oblique"

    # Header box
    legal_name_size: float = 13.0
    legal_name_line_gap: float = 5.0
    header_single_line_height: float = 60.0
    header_padding: float = 38.0
    tax_id_size: float = 10.0

    # Declaration box
    declaration_size: float = 7.5
    declaration_line_gap: float = 3.0
    declaration_padding: float = 14.0

    # Tables
    title_size: float = 14.0
    table_font_size: float = 9.0
    row_height: float = 18.0
    table_width_ratio: float = 0.5
    heavy_border: float = 1.0
    light_border: float = 0.5
    zebra_gray: float = 0.9

    # Signature zone, measured up from the bottom of the page
    accountant_line_y: float = 82.0
    client_line_offset: float = 110.0
    date_line_offset: float = 90.0
    signature_width_ratio: float = 0.55
    signature_image_max_height: float = 50.0
    signature_image_width_ratio: float = 0.65
    signature_name_size: float = 8.0
    signature_detail_size: float = 7.5

    # Template fill adjustments
    legal_name_field_size: float = 8.0
    legal_name_width_boost: float = 120.0

    @property
    def page_width(self) -> float:
        return self.page_size[0]

    @property
    def page_height(self) -> float:
        return self.page_size[1]

    @property
    def content_width(self) -> float:
        return self.page_width - self.margin_x * 2

    @property
    def client_line_y(self) -> float:
        return self.accountant_line_y + self.client_line_offset

    @property
    def date_line_y(self) -> float:
        return self.client_line_y + self.date_line_offset


@dataclass
class GenerationConfig:
    """Runtime configuration for generators and the batch pipeline."""
    templates_dir: Path = field(default_factory=lambda: Path("templates"))
    city: str = "Sinop"
    signature_timeout: float = 10.0
    max_workers: int = 4
    enable_parallel_processing: bool = False
    log_level: str = "INFO"
    minimum_wage: Decimal = Decimal("1412.00")
    inss_rate: Decimal = Decimal("11")
    layout: LayoutConfig = field(default_factory=LayoutConfig)

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "GenerationConfig":
        """Build a config from MEI_* environment variables (.env supported)."""
        load_dotenv(dotenv_path=env_file)
        defaults = cls()

        return cls(
            templates_dir=Path(os.getenv("MEI_TEMPLATES_DIR", str(defaults.templates_dir))),
            city=os.getenv("MEI_CITY", defaults.city),
            signature_timeout=float(os.getenv("MEI_SIGNATURE_TIMEOUT", defaults.signature_timeout)),
            max_workers=int(os.getenv("MEI_MAX_WORKERS", defaults.max_workers)),
            enable_parallel_processing=os.getenv("MEI_PARALLEL", "false").lower() in ("1", "true", "yes"),
            log_level=os.getenv("MEI_LOG_LEVEL", defaults.log_level),
            minimum_wage=Decimal(os.getenv("MEI_MINIMUM_WAGE", str(defaults.minimum_wage))),
            inss_rate=Decimal(os.getenv("MEI_INSS_RATE", str(defaults.inss_rate))),
        )


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging with the package's standard format."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(log_level)

    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
