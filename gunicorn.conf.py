# gunicorn -c gunicorn.conf.py run:app
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '5001')}"

# Socket.IO requires single worker with eventlet
workers = 1
worker_class = 'eventlet'

worker_connections = 1000
max_requests = 1000
max_requests_jitter = 50
# LLM calls block the request until Bedrock answers
timeout = 180
keepalive = 2
preload_app = True

# Logging
accesslog = '-'
errorlog = '-'
loglevel = 'info'
