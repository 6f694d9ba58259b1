"""WSGI entrypoint for Gunicorn.

Claims live in process memory, so run a single worker (threads are fine):
  gunicorn -w 1 --threads 8 -b 0.0.0.0:8000 wsgi:app
"""

from rafflehub import create_app

app = create_app()
