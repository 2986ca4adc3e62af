from flask import Flask, jsonify, request
from flask_caching import Cache

from CT_interface import DEFAULT_TIMEOUT, get_sth
from auditor import Auditor, audit_logs
from configuration import CONFIGURATION_FILE, TrustConfig
from logging_config import configure_logging, get_logger
from signature_verifier import default_verifier

logger = get_logger(__name__)


def outcome_key(log_uri):
    return f"outcome:{log_uri}"


def create_app(trust: TrustConfig, fetch_sth=get_sth, verifier=default_verifier, timeout=DEFAULT_TIMEOUT):
    app = Flask(__name__)
    cache = Cache(app, config={
        'CACHE_TYPE': 'SimpleCache',
        'CACHE_DEFAULT_TIMEOUT': 0  # keep outcomes until the next audit of the log
    })
    auditor = Auditor.with_trust(trust, fetch_sth=fetch_sth, verifier=verifier, timeout=timeout)

    @app.route('/public_key', methods=['GET'])
    def get_public_key():
        return jsonify(trust.to_dict()), 200

    @app.route('/audit', methods=['GET'])
    def audit():
        log_uris = request.args.getlist("log_uri")
        if not log_uris:
            return jsonify({"error": "No log_uri given"}), 400

        outcomes = [outcome.to_dict() for outcome in audit_logs(auditor, log_uris)]
        for outcome in outcomes:
            cache.set(outcome_key(outcome["log_uri"]), outcome)
        return jsonify(outcomes), 200

    @app.route('/audit/latest', methods=['GET'])
    def latest_audit():
        log_uri = request.args.get("log_uri")
        if not log_uri:
            return jsonify({"error": "No log_uri given"}), 400
        outcome = cache.get(outcome_key(log_uri))
        if outcome is None:
            return jsonify({"error": f"{log_uri} has not been audited"}), 404
        return jsonify(outcome), 200

    return app


if __name__ == '__main__':
    import sys
    config_path = sys.argv[1] if len(sys.argv) > 1 else CONFIGURATION_FILE
    configure_logging(1)
    app = create_app(TrustConfig.load(config_path))
    logger.info("audit service starting", config=config_path)
    app.run(port=5000)
