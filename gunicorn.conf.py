import multiprocessing
import os

wsgi_app = 'config.wsgi:application'
proc_name = 'digital-prizes'

bind = os.getenv('GUNICORN_BIND', '0.0.0.0:8000')
# Handlers are stateless; inventory races are settled by the database
workers = int(os.getenv('GUNICORN_WORKERS', multiprocessing.cpu_count() * 2 + 1))
# Bulk awards of a few thousand phones run inside one request
timeout = int(os.getenv('GUNICORN_TIMEOUT', '120'))

# Application logs go to logs/ through Django LOGGING; gunicorn logs to stdout
accesslog = '-'
errorlog = '-'
loglevel = os.getenv('GUNICORN_LOG_LEVEL', 'info')
