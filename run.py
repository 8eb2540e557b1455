# run.py
import eventlet
eventlet.monkey_patch()
import logging
import os
from voicepath import create_app, socketio

app = create_app()

# Configure logging to include line number
logging.basicConfig(
    format='%(asctime)s [%(levelname)s] %(filename)s:%(lineno)d - %(message)s',
    level=logging.INFO
)


if __name__ == "__main__":
    port = int(os.environ.get('PORT', 5001))
    debug = os.environ.get('FLASK_DEBUG', '0') in {'1', 'true', 'True'}
    socketio.run(app, host="0.0.0.0", port=port, debug=debug)
