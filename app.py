import logging
import os
import sys

from flask import Flask, jsonify, request, send_from_directory
from werkzeug.exceptions import HTTPException

import config
from qa_errors import QuestionBoardError
from qa_store import QuestionStore


def configure_logging(app: Flask, level_name: str = config.LOGLEVEL) -> None:
    loglevel = getattr(logging, level_name, logging.INFO)

    # If running under Gunicorn, reuse its error handlers so logs go to the same place
    gunicorn_logger = logging.getLogger('gunicorn.error')
    if getattr(gunicorn_logger, 'handlers', None):
        handlers = gunicorn_logger.handlers
        for h in handlers:
            h.setLevel(loglevel)
        app.logger.handlers = handlers
        app.logger.setLevel(loglevel)
        app.logger.propagate = False
        for name in ('werkzeug', 'qa_store'):
            logging.getLogger(name).handlers = handlers
            logging.getLogger(name).setLevel(loglevel)
        return

    # Standalone: ensure there's a StreamHandler to stdout
    root = logging.getLogger()
    root.setLevel(loglevel)
    found = False
    for h in list(root.handlers):
        if isinstance(h, logging.StreamHandler) and getattr(h, 'stream', None) in (sys.stdout, sys.stderr, None):
            found = True
            h.setLevel(loglevel)
            break
    if not found:
        sh = logging.StreamHandler(sys.stdout)
        sh.setLevel(loglevel)
        sh.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(name)s: %(message)s'))
        root.addHandler(sh)
    app.logger.setLevel(loglevel)
    app.logger.propagate = True
    logging.getLogger('werkzeug').setLevel(loglevel)


def _json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def create_app(questions_file=None, static_dir=None) -> Flask:
    app = Flask(__name__, static_folder=None)
    configure_logging(app)

    store = QuestionStore(questions_file or config.QUESTIONS_FILE)
    store.ensure_initialized()
    app.config['STATIC_DIR'] = os.fspath(static_dir or config.STATIC_DIR)

    @app.errorhandler(QuestionBoardError)
    def handle_store_error(e):
        if e.status_code >= 500:
            app.logger.error("Storage failure on %s %s", request.method, request.path, exc_info=e)
            return jsonify({"success": False, "message": "Internal server error"}), 500
        return jsonify({"success": False, "message": str(e)}), e.status_code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return e
        app.logger.error("Unhandled error on %s %s", request.method, request.path, exc_info=e)
        return jsonify({"success": False, "message": "Internal server error"}), 500

    @app.route("/api/submit-question", methods=["POST"])
    def api_submit_question():
        body = _json_body()
        question_id = store.submit_question(
            body.get("question"),
            name=body.get("name"),
            email=body.get("email"),
            timestamp=body.get("timestamp"),
            ip=body.get("ip") or request.remote_addr,
            user_agent=body.get("userAgent") or request.headers.get("User-Agent"),
        )
        return jsonify({
            "success": True,
            "message": "Question submitted successfully",
            "questionId": question_id,
        })

    @app.route("/api/questions")
    def api_questions():
        return jsonify(store.list_questions())

    @app.route("/api/questions/<question_id>")
    def api_question(question_id):
        return jsonify(store.get_question(question_id))

    @app.route("/api/questions/<question_id>/answer", methods=["POST"])
    def api_add_answer(question_id):
        body = _json_body()
        store.add_answer(
            question_id,
            body.get("answer"),
            author=body.get("author"),
            is_owner=bool(body.get("isOwner")),
        )
        return jsonify({"success": True, "message": "Answer added successfully"})

    @app.route("/api/questions/<question_id>/like", methods=["POST"])
    def api_like(question_id):
        likes = store.like_question(question_id)
        return jsonify({"success": True, "likes": likes})

    @app.route("/health")
    def health_check():
        return jsonify({"status": "healthy"})

    @app.route("/", defaults={"path": ""})
    @app.route("/<path:path>")
    def index(path):
        static_root = app.config['STATIC_DIR']
        if path and os.path.isfile(os.path.join(static_root, path)):
            return send_from_directory(static_root, path)
        if not os.path.isfile(os.path.join(static_root, "index.html")):
            return jsonify({"success": False, "message": "Not found"}), 404
        return send_from_directory(static_root, "index.html")

    app.logger.info("Questions are saved to: %s", store.path)
    return app


app = create_app()


if __name__ == "__main__":
    app.logger.info("Server running on http://%s:%d", config.HOST, config.PORT)
    app.run(debug=config.DEBUG, host=config.HOST, port=config.PORT, threaded=True)
