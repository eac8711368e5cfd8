"""
Sum-check / GKR Flask Blueprint
================================

2개 페이지: Sum-check, GKR Round
각 페이지는 GET으로 저장된 상태를 JSON으로 보여주고,
POST 액션(load-example, prove, tamper, verify, reset)은 TinyDB 상태를 바꾼 뒤
페이지로 리다이렉트한다.
"""

import logging
import random

from flask import Blueprint, jsonify, redirect, request, url_for
from tinydb import Query

from zkp.sumcheck.errors import InvalidArgumentError, RejectError
from zkp.sumcheck.field import FR, make_field
from zkp.sumcheck.example import (
    DEFAULT_NUM_PRODUCTS,
    DEFAULT_NUM_VARIABLES,
    DEFAULT_SEED,
    GKR_EXAMPLE_DIM,
    GKR_EXAMPLE_MODULUS,
    gkr_example,
    random_list_of_products,
)
from zkp.sumcheck.protocol import extract_sum, prove, verify
from zkp.gkr.round_sumcheck import generate_claim_and_proof, verify_claim

from sumcheck_serializers import (
    serialize_field, deserialize_field,
    serialize_fr, deserialize_fr,
    serialize_list_of_products, deserialize_list_of_products,
    serialize_dense_mle, deserialize_dense_mle,
    serialize_sparse_mle, deserialize_sparse_mle,
    serialize_proof, deserialize_proof,
    serialize_subclaim,
    serialize_gkr_claim, deserialize_gkr_claim,
    serialize_gkr_proof, deserialize_gkr_proof,
    serialize_gkr_subclaim,
    fr_short,
)

logger = logging.getLogger(__name__)

sumcheck_bp = Blueprint('sumcheck', __name__, url_prefix='/sumcheck')
gkr_bp = Blueprint('gkr', __name__, url_prefix='/gkr')

DATA = Query()

# DB는 app.py에서 주입
DB = None

# 데모 입력 상한 (요청 하나에서 2^n 테이블을 다룸)
MAX_DEMO_VARIABLES = 10


def init_sumcheck_bp(db):
    """app.py에서 DB를 주입받는다."""
    global DB
    DB = db


# ─── DB 헬퍼 ───

def db_get(key):
    """DB에서 키로 데이터를 조회한다."""
    result = DB.search(DATA.type == key)
    if not result:
        return None
    return result[0].get("data")


def db_set(key, data):
    """DB에 키로 데이터를 저장한다."""
    DB.upsert({"type": key, "data": data}, DATA.type == key)


def db_remove(key):
    """DB에서 키를 삭제한다."""
    DB.remove(DATA.type == key)


def db_remove_prefix(prefix):
    """prefix로 시작하는 모든 키를 삭제한다."""
    DB.remove(DATA.type.test(lambda t: t.startswith(prefix)))


def form_int(name, default):
    """폼 값을 정수로 읽는다. 잘못된 값이면 InvalidArgumentError."""
    raw = request.form.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise InvalidArgumentError(f"{name}은(는) 정수여야 합니다: {raw!r}")


def _bad_request(error):
    return jsonify({"error": str(error)}), 400


sumcheck_bp.register_error_handler(InvalidArgumentError, _bad_request)
gkr_bp.register_error_handler(InvalidArgumentError, _bad_request)


# ──────────────────────────────────────────────────────────────
# Sum-check 페이지
# ──────────────────────────────────────────────────────────────

@sumcheck_bp.route("/")
def sumcheck_page():
    """sum-check 상태를 JSON으로 반환."""
    return jsonify({
        "polynomial": db_get("sumcheck.polynomial.info"),
        "claimed_sum": db_get("sumcheck.claimed_sum"),
        "proof": db_get("sumcheck.proof"),
        "proof_hex": db_get("sumcheck.proof_hex"),
        "verdict": db_get("sumcheck.verdict"),
    })


@sumcheck_bp.route("/load-example", methods=["POST"])
def sumcheck_load_example():
    """무작위 곱의 합 다항식과 참인 합을 로드한다."""
    num_variables = form_int("num-variables", DEFAULT_NUM_VARIABLES)
    num_products = form_int("num-products", DEFAULT_NUM_PRODUCTS)
    max_multiplicands = form_int("max-multiplicands", 3)
    seed = form_int("seed", DEFAULT_SEED)
    modulus = form_int("modulus", FR.field_modulus)

    if not 1 <= num_variables <= MAX_DEMO_VARIABLES:
        raise InvalidArgumentError(f"변수 개수는 1..{MAX_DEMO_VARIABLES} 이어야 합니다: {num_variables}")
    if num_products < 1 or max_multiplicands < 1:
        raise InvalidArgumentError("곱 항 개수와 길이는 1 이상이어야 합니다")

    field = make_field(modulus)
    polynomial, claimed_sum = random_list_of_products(
        num_variables, (1, max_multiplicands), num_products, field, random.Random(seed)
    )

    db_remove_prefix("sumcheck.")
    db_set("sumcheck.polynomial", serialize_list_of_products(polynomial))
    db_set("sumcheck.polynomial.info", {
        "modulus": serialize_field(field),
        "num_variables": polynomial.num_variables,
        "max_multiplicands": polynomial.max_multiplicands,
        "num_products": len(polynomial.products),
        "seed": seed,
    })
    db_set("sumcheck.claimed_sum", serialize_fr(claimed_sum))
    return redirect(url_for("sumcheck.sumcheck_page"))


@sumcheck_bp.route("/prove", methods=["POST"])
def sumcheck_prove():
    """저장된 다항식으로 비대화식 증명을 만든다."""
    data = db_get("sumcheck.polynomial")
    if not data:
        return redirect(url_for("sumcheck.sumcheck_page"))

    polynomial = deserialize_list_of_products(data)
    proof = prove(polynomial)

    db_set("sumcheck.proof", serialize_proof(proof))
    db_set("sumcheck.proof_hex", proof.to_bytes().hex())
    db_remove("sumcheck.verdict")
    return redirect(url_for("sumcheck.sumcheck_page"))


@sumcheck_bp.route("/tamper", methods=["POST"])
def sumcheck_tamper():
    """증명의 한 평가값에 delta를 더한다 (건전성 실험용)."""
    data = db_get("sumcheck.proof")
    poly_data = db_get("sumcheck.polynomial")
    if not data or not poly_data:
        return redirect(url_for("sumcheck.sumcheck_page"))

    field = deserialize_field(poly_data.get("modulus"))
    round_index = form_int("round", 1)
    position = form_int("position", 0)
    delta = form_int("delta", 1)
    if not 1 <= round_index <= len(data):
        raise InvalidArgumentError(f"라운드는 1..{len(data)} 이어야 합니다: {round_index}")
    if not 0 <= position < len(data[round_index - 1]):
        raise InvalidArgumentError(f"평가값 위치가 범위를 벗어났습니다: {position}")

    tampered = deserialize_fr(data[round_index - 1][position], field) + delta
    data[round_index - 1][position] = serialize_fr(tampered)
    db_set("sumcheck.proof", data)
    db_set("sumcheck.proof_hex", deserialize_proof(data, field).to_bytes().hex())
    db_remove("sumcheck.verdict")
    return redirect(url_for("sumcheck.sumcheck_page"))


@sumcheck_bp.route("/verify", methods=["POST"])
def sumcheck_verify():
    """저장된 증명을 주장된 합에 대해 검증한다."""
    poly_data = db_get("sumcheck.polynomial")
    proof_data = db_get("sumcheck.proof")
    if not poly_data or not proof_data:
        return redirect(url_for("sumcheck.sumcheck_page"))

    polynomial = deserialize_list_of_products(poly_data)
    field = polynomial.field
    proof = deserialize_proof(proof_data, field)
    claimed = request.form.get("claimed-sum")
    if claimed:
        claimed_sum = deserialize_fr(form_int("claimed-sum", 0), field)
    else:
        claimed_sum = deserialize_fr(db_get("sumcheck.claimed_sum"), field)

    try:
        subclaim = verify(polynomial.info(), claimed_sum, proof, field)
    except RejectError as e:
        verdict = {"status": "rejected", "round": e.round, "reason": str(e)}
    else:
        matches = polynomial.evaluate(list(subclaim.point)) == subclaim.expected_evaluation
        verdict = {
            "status": "convinced",
            "subclaim": serialize_subclaim(subclaim),
            "evaluation_matches": matches,
            "expected_short": fr_short(subclaim.expected_evaluation),
            "proof_sum": serialize_fr(extract_sum(proof)),
        }
    logger.info("sum-check demo verdict: %s", verdict["status"])
    db_set("sumcheck.verdict", verdict)
    return redirect(url_for("sumcheck.sumcheck_page"))


@sumcheck_bp.route("/reset", methods=["POST"])
def sumcheck_reset():
    """모든 sum-check 데이터를 클리어한다."""
    db_remove_prefix("sumcheck.")
    return redirect(url_for("sumcheck.sumcheck_page"))


# ──────────────────────────────────────────────────────────────
# GKR Round 페이지
# ──────────────────────────────────────────────────────────────

@gkr_bp.route("/")
def gkr_page():
    """GKR 라운드 상태를 JSON으로 반환."""
    return jsonify({
        "function": db_get("gkr.function.info"),
        "claim": db_get("gkr.claim"),
        "proof": db_get("gkr.proof"),
        "verdict": db_get("gkr.verdict"),
    })


@gkr_bp.route("/load-example", methods=["POST"])
def gkr_load_example():
    """작은 체 위의 GKR 예제 (f1, f2, f3, g)를 로드한다."""
    dim = form_int("dim", GKR_EXAMPLE_DIM)
    modulus = form_int("modulus", GKR_EXAMPLE_MODULUS)
    seed = form_int("seed", DEFAULT_SEED)
    if not 1 <= dim <= MAX_DEMO_VARIABLES // 3:
        raise InvalidArgumentError(f"dim은 1..{MAX_DEMO_VARIABLES // 3} 이어야 합니다: {dim}")

    f1, f2, f3, g = gkr_example(dim, modulus, seed)
    field = make_field(modulus)

    db_remove_prefix("gkr.")
    db_set("gkr.function", {
        "modulus": serialize_field(field),
        "f1": serialize_sparse_mle(f1),
        "f2": serialize_dense_mle(f2),
        "f3": serialize_dense_mle(f3),
        "g": [serialize_fr(x) for x in g],
    })
    db_set("gkr.function.info", {
        "modulus": serialize_field(field),
        "dim": dim,
        "f1_nonzero": f1.num_nonzero(),
        "seed": seed,
    })
    return redirect(url_for("gkr.gkr_page"))


def _load_gkr_function():
    data = db_get("gkr.function")
    if not data:
        return None
    field = deserialize_field(data["modulus"])
    f1 = deserialize_sparse_mle(data["f1"], field)
    f2 = deserialize_dense_mle(data["f2"], field)
    f3 = deserialize_dense_mle(data["f3"], field)
    g = [deserialize_fr(x, field) for x in data["g"]]
    return field, f1, f2, f3, g


@gkr_bp.route("/prove", methods=["POST"])
def gkr_prove():
    """주장과 비대화식 증명을 만든다."""
    loaded = _load_gkr_function()
    if loaded is None:
        return redirect(url_for("gkr.gkr_page"))
    _, f1, f2, f3, g = loaded

    claim, proof = generate_claim_and_proof(f1, f2, f3, g)
    db_set("gkr.claim", serialize_gkr_claim(claim))
    db_set("gkr.proof", serialize_gkr_proof(proof))
    db_remove("gkr.verdict")
    return redirect(url_for("gkr.gkr_page"))


@gkr_bp.route("/verify", methods=["POST"])
def gkr_verify():
    """저장된 주장과 증명을 검증하고 남은 주장을 직접 확인한다."""
    loaded = _load_gkr_function()
    claim_data = db_get("gkr.claim")
    proof_data = db_get("gkr.proof")
    if loaded is None or not claim_data or not proof_data:
        return redirect(url_for("gkr.gkr_page"))
    field, f1, f2, f3, g = loaded

    claim = deserialize_gkr_claim(claim_data, field)
    proof = deserialize_gkr_proof(proof_data, field)
    try:
        subclaim = verify_claim(claim, proof)
    except RejectError as e:
        verdict = {"status": "rejected", "round": e.round, "reason": str(e)}
    else:
        verdict = {
            "status": "convinced",
            "subclaim": serialize_gkr_subclaim(subclaim),
            "evaluation_matches": subclaim.verify_subclaim(f1, f2, f3, g),
        }
    logger.info("GKR demo verdict: %s", verdict["status"])
    db_set("gkr.verdict", verdict)
    return redirect(url_for("gkr.gkr_page"))


@gkr_bp.route("/reset", methods=["POST"])
def gkr_reset():
    """모든 GKR 데이터를 클리어한다."""
    db_remove_prefix("gkr.")
    return redirect(url_for("gkr.gkr_page"))
