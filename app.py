import logging
import os

from flask import Flask, redirect, url_for

from tinydb import TinyDB
from tinydb.storages import MemoryStorage

from ivc_routes import ivc_bp, init_ivc_bp

logging.basicConfig(
    level=os.environ.get("IVC_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def open_db(path=None):
    """IVC_DB_PATH가 ':memory:'이면 메모리 DB, 아니면 파일 DB."""
    path = path or os.environ.get("IVC_DB_PATH", "db.json")
    if path == ":memory:":
        return TinyDB(storage=MemoryStorage)   # Memory DB
    return TinyDB(path)                         # Storage DB


def create_app(db=None):
    app = Flask(__name__)
    app.secret_key = os.environ.get("IVC_SECRET_KEY", "key")

    db = db if db is not None else open_db()
    init_ivc_bp(db.table("ivc"))
    app.register_blueprint(ivc_bp)

    @app.route("/")
    def main():
        return redirect(url_for("ivc.list_steps"))

    logger.info("IVC app ready")
    return app


if __name__ == "__main__":
    create_app().run(debug=True)
