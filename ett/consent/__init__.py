from .status import ConsentEvent, ConsentStatus, consent_status, get_latest_date, get_latest_time

__all__ = ["ConsentEvent", "ConsentStatus", "consent_status", "get_latest_date", "get_latest_time"]
