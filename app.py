import logging

from flask import Flask, jsonify, url_for

from tinydb import TinyDB
from tinydb.storages import MemoryStorage

from sumcheck_routes import sumcheck_bp, gkr_bp, init_sumcheck_bp

logging.basicConfig(level=logging.INFO,
                    format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def create_app(db_path=None):
    """Flask 앱을 만든다.

    Args:
        db_path: TinyDB JSON 파일 경로 (None이면 메모리 DB)
    """
    if db_path is None:
        db = TinyDB(storage=MemoryStorage)  # Memory DB
    else:
        db = TinyDB(db_path)                # Storage DB

    app = Flask(__name__)
    app.secret_key = "key"

    init_sumcheck_bp(db.table("sumcheck"))
    app.register_blueprint(sumcheck_bp)
    app.register_blueprint(gkr_bp)

    @app.route("/")
    def main():
        return jsonify({
            "pages": {
                "sumcheck": url_for("sumcheck.sumcheck_page"),
                "gkr": url_for("gkr.gkr_page"),
            }
        })

    return app


app = create_app()


if __name__ == "__main__":
    app.run(debug=True)
