import logging
import sys
import json
from datetime import datetime


# Extra fields lifted from `logger.x(..., extra={...})` into the JSON line
STRUCTURED_FIELDS = (
    "transaction_hash",
    "campaign_id",
    "brand_id",
    "event_type",
    "log_index",
    "field",
    "reason",
    "amount",
    "sender",
    "trackable_actions",
)


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""
    
    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        
        for field in STRUCTURED_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)
            
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
            
        return json.dumps(log_data, default=str)


def setup_logger(name: str = "campaign_payments") -> logging.Logger:
    """Setup application logger with JSON formatting."""
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    
    # Prevent duplicate handlers
    if logger.handlers:
        return logger
    
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)
    
    return logger


# Global logger instance
logger = setup_logger()
