from .report import render_json_report, render_text_report, report_to_dict

__all__ = ["render_json_report", "render_text_report", "report_to_dict"]
