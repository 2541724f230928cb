import json
import logging
import datetime
import traceback

from dockerdemo.config.settings import settings


class StructuredLogger:

    def __init__(self, logger_name='StructuredLogger', level=None):
        self.logger = logging.getLogger(logger_name)
        self.logger.setLevel(level or logging.DEBUG)

        # uvicorn --reload and the test suite import this module more than once
        if not any(getattr(h, '_structured', False) for h in self.logger.handlers):
            handler = logging.StreamHandler()
            handler._structured = True
            formatter = logging.Formatter('%(message)s')
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def _log(self, level, message, exc_info=None, **kwargs):
        log_entry = {
            'timestamp': datetime.datetime.now().isoformat(),
            'level': level.upper(),
            'message': message,
            **kwargs
        }
        if exc_info is not None:
            log_entry['exc_type'] = type(exc_info).__name__
            log_entry['traceback'] = ''.join(
                traceback.format_exception(type(exc_info), exc_info, exc_info.__traceback__)
            )
        json_log = json.dumps(log_entry, default=str)
        getattr(self.logger, level)(json_log)  # Invoke the method corresponding to the level

    def info(self, message, **kwargs):
        self._log('info', message, **kwargs)

    def warning(self, message, **kwargs):
        self._log('warning', message, **kwargs)

    def error(self, message, **kwargs):
        self._log('error', message, **kwargs)

    def debug(self, message, **kwargs):
        self._log('debug', message, **kwargs)


app_logger = StructuredLogger('DockerDemoLogger', level=settings.LOG_LEVEL.upper())
