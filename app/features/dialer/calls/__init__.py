"""
Call outcome logging.
"""

from .service import CallLogService, build_crm_log_text, call_log_service, onepage_result_for

__all__ = ["CallLogService", "build_crm_log_text", "call_log_service", "onepage_result_for"]
