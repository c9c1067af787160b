from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from payportal.api.schemas import (
    EligibilityResponseSchema,
    ErrorResponseSchema,
    PaymentRequestSchema,
    PayoutRequestSchema,
    QuoteRequestSchema,
)
from payportal.config import gateway_mode
from payportal.core.errors import BackendError, ComputationError, PortalError
from payportal.core.session import AuthSession
from payportal.models.account import default_payout_account, payout_eligible
from payportal.models.transaction import PaymentOrder, PayoutRequest
from payportal.models.user import AuthContext
from payportal.services.portal import PortalCore
from payportal.services.status_normalizer import normalize_record
from payportal.utils.helpers import breakdown_display

api = Blueprint("api", __name__)


def _auth() -> AuthContext:
    return AuthContext.from_bearer(
        request.headers.get("Authorization"),
        role=request.headers.get("X-Portal-Role"),
        user_id=request.headers.get("X-Portal-User"),
    )


def _portal() -> PortalCore:
    # Built per request: no verification state survives between requests.
    return PortalCore(
        AuthSession(_auth()),
        base_url=current_app.config["BACKEND_URL"],
        timeout=current_app.config["HTTP_TIMEOUT"],
        http_session=current_app.extensions.get("payportal.http_session"),
    )


def _error(error: PortalError, status: int):
    body = ErrorResponseSchema(code=error.code, detail=error.message)
    return jsonify(body.model_dump()), status


@api.errorhandler(ValidationError)
def handle_validation_error(e):
    return jsonify({"code": "BAD_REQUEST", "detail": str(e)}), 400


@api.errorhandler(ComputationError)
def handle_computation_error(e):
    return _error(e, 422)


@api.errorhandler(BackendError)
def handle_backend_error(e):
    return _error(e, 502)


@api.route('/verification', methods=['GET'])
def verification_status():
    state = _portal().gate.refresh()
    return jsonify(state.to_dict()), 200


@api.route('/quotes/payment', methods=['POST'])
def quote_payment():
    data = QuoteRequestSchema.model_validate(request.get_json(silent=True) or {})
    breakdown = _portal().orchestrator.quote_payment(data.amount)
    return jsonify({**breakdown.to_dict(), "display": breakdown_display(breakdown)}), 200


@api.route('/quotes/payout', methods=['POST'])
def quote_payout():
    data = QuoteRequestSchema.model_validate(request.get_json(silent=True) or {})
    breakdown = _portal().orchestrator.quote_payout(data.amount)
    return jsonify({**breakdown.to_dict(), "display": breakdown_display(breakdown)}), 200


@api.route('/payments', methods=['POST'])
def create_payment():
    data = PaymentRequestSchema.model_validate(request.get_json(silent=True) or {})
    order = PaymentOrder(
        amount_requested=data.amount,
        customer_mobile=data.customer_mobile,
        remarks=data.remarks,
        currency=current_app.config["CURRENCY"],
        customer=data.customer,
    )
    result = _portal().orchestrator.submit_payment(order)
    return jsonify({**result.to_dict(), "gateway_mode": gateway_mode(current_app.config["GATEWAY_ENV"])}), 200


@api.route('/payments/<order_id>/verify', methods=['POST'])
def verify_payment(order_id):
    result = _portal().orchestrator.resume_payment(order_id)
    return jsonify(result.to_dict()), 200


@api.route('/payouts', methods=['POST'])
def create_payout():
    data = PayoutRequestSchema.model_validate(request.get_json(silent=True) or {})
    payout = PayoutRequest(
        amount_requested=data.amount,
        bank_account_id=data.bank_account_id,
        remarks=data.remarks,
    )
    result = _portal().orchestrator.submit_payout(payout)
    return jsonify(result.to_dict()), 200


@api.route('/payouts', methods=['GET'])
def payout_history():
    page = request.args.get('page', 1, type=int)
    limit = request.args.get('limit', 10, type=int)
    status = request.args.get('status') or None
    data = _portal().client.list_payouts(page=page, limit=limit, status=status)
    if not isinstance(data, dict):
        data = {}
    payouts = [
        {**record, "internal_status": normalize_record(record).value}
        for record in data.get("payouts") or []
        if isinstance(record, dict)
    ]
    return jsonify({"payouts": payouts, "page": page, "total_pages": data.get("totalPages", 1)}), 200


@api.route('/payouts/<payout_id>/status', methods=['GET'])
def payout_status(payout_id):
    result = _portal().orchestrator.check_payout_status(payout_id)
    return jsonify(result.to_dict()), 200


@api.route('/payouts/accounts', methods=['GET'])
def payout_accounts():
    accounts = _portal().client.list_bank_accounts()
    eligible = payout_eligible(accounts)
    default = default_payout_account(accounts)
    return jsonify({
        "accounts": [
            {"account_id": a.account_id, "holder": a.account_holder_name, "number": a.masked_number}
            for a in eligible
        ],
        "default_account_id": default.account_id if default else None,
    }), 200


@api.route('/retailers/eligibility', methods=['GET'])
def retailer_eligibility():
    decision = _portal().onboarding.check()
    body = EligibilityResponseSchema(allowed=decision.allowed, reason=decision.reason, banner=decision.banner)
    return jsonify(body.model_dump()), 200
