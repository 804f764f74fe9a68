# app/core/db_logging_handler.py
import logging
import sys
import traceback
from app.db.session import SessionLocal
from app.crud import crud_system

class DatabaseHandler(logging.Handler):
    """
    Writes ERROR and CRITICAL records into the systemalerts table so they show up
    in /monitoring/data.
    """
    def emit(self, record: logging.LogRecord):
        if record.levelno < logging.ERROR:
            return
        # crud_system logs its own failures; writing those back would loop.
        if record.name.startswith("app.crud.system"):
            return

        details = None
        if record.exc_info:
            details = "".join(traceback.format_exception(*record.exc_info))

        # New session per record, handlers run on the queue listener thread
        db = SessionLocal()
        try:
            crud_system.create_alert(
                db=db,
                level=record.levelname,
                message=record.getMessage(),
                details=details
            )
        except Exception as e:
            sys.stderr.write(f"--- CRITICAL: FAILED TO WRITE LOG TO DATABASE ---\n")
            sys.stderr.write(f"Original Log: [{record.levelname}] {record.getMessage()}\n")
            sys.stderr.write(f"Database Error: {e}\n")
        finally:
            db.close()
