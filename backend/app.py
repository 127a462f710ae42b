import logging

from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

import compiler  # analysis pipeline
from lexer import tokenize
from syntax_checker import check_syntax
from semantic_analyzer import check_semantics
from ir_generator import generate_tac
from optimizer import optimize
from settings import Config

logger = logging.getLogger(__name__)


class RequestError(Exception):
    def __init__(self, message, status=400):
        super().__init__(message)
        self.message = message
        self.status = status


def read_field(name, kind=str):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise RequestError("request body must be a JSON object")
    value = data.get(name)
    if not isinstance(value, kind):
        raise RequestError(f"'{name}' must be a {'string' if kind is str else 'list'}")
    return value


def result_to_dict(result):
    """
    Serialize a compile_source() result to JSON-friendly values
    """
    return {
        "tokens": [t.to_dict() for t in result['tokens']],
        "syntax_errors": [d.to_dict() for d in result['syntax_errors']],
        "semantic_errors": [d.to_dict() for d in result['semantic_errors']],
        "errors": result['errors'],
        "tac": [repr(t) for t in result['tac']],
        "optimized_tac": [repr(t) for t in result['optimized_tac']],
        "symbol_table": result['symbol_table'],
    }


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    app.config.from_prefixed_env("MINIC")
    if overrides:
        app.config.update(overrides)
    CORS(app, origins=app.config["CORS_ORIGINS"])  # allow cross-origin requests

    @app.errorhandler(RequestError)
    def bad_request(e):
        return jsonify({"errors": [e.message]}), e.status

    @app.errorhandler(413)
    def too_large(e):
        return jsonify({"errors": ["source text too large"]}), 413

    @app.errorhandler(Exception)
    def unexpected(e):
        if isinstance(e, HTTPException):
            return e
        logger.exception("analysis failed")
        return jsonify({
            "tokens": [],
            "syntax_errors": [],
            "semantic_errors": [],
            "tac": [],
            "optimized_tac": [],
            "errors": [f"Unexpected error: {str(e)}"],
            "symbol_table": {},
        }), 500

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.route("/compile", methods=["POST"])
    def compile_code():
        code = read_field("code")
        result = compiler.compile_source(code)
        return jsonify(result_to_dict(result))

    @app.route("/tokens", methods=["POST"])
    def tokens():
        return jsonify({"tokens": [t.to_dict() for t in tokenize(read_field("code"))]})

    @app.route("/syntax", methods=["POST"])
    def syntax():
        return jsonify({"errors": [d.to_dict() for d in check_syntax(read_field("code"))]})

    @app.route("/semantics", methods=["POST"])
    def semantics():
        return jsonify({"errors": [d.to_dict() for d in check_semantics(read_field("code"))]})

    @app.route("/tac", methods=["POST"])
    def tac():
        return jsonify({"tac": [repr(t) for t in generate_tac(read_field("code"))]})

    @app.route("/optimize", methods=["POST"])
    def optimize_tac():
        lines = read_field("tac", list)
        if not all(isinstance(line, str) for line in lines):
            raise RequestError("'tac' must be a list of strings")
        return jsonify({"optimized_tac": [repr(t) for t in optimize(lines)]})

    return app


if __name__ == "__main__":
    app = create_app()
    logging.basicConfig(level=app.config["LOG_LEVEL"],
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.run(host=app.config["HOST"], port=app.config["PORT"], debug=app.config["DEBUG"])
