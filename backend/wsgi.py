# backend/wsgi.py
import logging

from managefy import create_app

app = create_app()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app.run(host=app.config["BIND_HOST"], port=app.config["BIND_PORT"])
