# gunicorn.conf.py
import multiprocessing, os

bind = f"0.0.0.0:{os.getenv('PORT','5000')}"
wsgi_app = "relchart.main:app"

# Scoring is pure CPU; one thread per worker, workers scale with cores.
# RELCHART_PARALLEL only adds a 2-thread pool inside a single request.
workers = int(os.getenv("WEB_CONCURRENCY", max(2, multiprocessing.cpu_count())))
threads = 1
worker_class = "sync"
preload_app = True
timeout = int(os.getenv("RELCHART_TIMEOUT", "60"))
graceful_timeout = 30
keepalive = 2

raw_env = [f"RELCHART_CONFIG={os.getenv('RELCHART_CONFIG', 'config/defaults.yaml')}"]

accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOGLEVEL", "info")
access_log_format = (
    '%(h)s "%(r)s" %(s)s %(b)s '
    'req_id:%({X-Request-ID}i)s rt:%(L)s'
)
