"""PDF helpers."""

from signflow.infrastructure.pdf.page_counter import PypdfPageCounter

__all__: list[str] = ["PypdfPageCounter"]
