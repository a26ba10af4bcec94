# Gunicorn config: gunicorn -c gunicorn_conf.py pixsoul.main:app
bind = "0.0.0.0:8000"
# Sessions live in process memory, so stay on one worker until they are shared
workers = 1
worker_class = "uvicorn.workers.UvicornWorker"
loglevel = "info"
accesslog = "/var/log/gunicorn/access.log"
errorlog = "/var/log/gunicorn/error.log"
