from erdlayout.diagnostics.report import generate_layout_report

__all__ = ["generate_layout_report"]
