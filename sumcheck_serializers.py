"""
Sum-check / GKR 데이터 직렬화/역직렬화 헬퍼
=============================================

TinyDB에 저장 가능한 형태로 sum-check 객체를 변환한다.
체 원소는 str(int)로 저장하고, 체 위수는 별도 필드("modulus")로 기록한다.
"""

from zkp.sumcheck.field import FR, make_field
from zkp.sumcheck.mle import DenseMLE, SparseMLE
from zkp.sumcheck.products import ListOfProducts
from zkp.sumcheck.protocol import Proof, ProverMessage, SubClaim
from zkp.gkr.round_sumcheck import GKRClaim, GKRProof, GKRRoundSubClaim


# ─── 체 ───

def serialize_field(field):
    """체 클래스 → 위수 (str)"""
    return str(field.field_modulus)


def deserialize_field(data):
    """위수 (str) → 체 클래스"""
    if data is None:
        return FR
    return make_field(int(data))


# ─── FR ───

def serialize_fr(val):
    """FR → str(int)"""
    return str(int(val))


def deserialize_fr(s, field=FR):
    """str(int) → FR"""
    return field(int(s))


def serialize_fr_list(lst):
    """list[FR] → list[str]"""
    return [str(int(v)) for v in lst]


def deserialize_fr_list(data, field=FR):
    """list[str] → list[FR]"""
    return [field(int(s)) for s in data]


def fr_short(val):
    """긴 체 원소를 화면용으로 줄인다."""
    s = str(int(val))
    if len(s) <= 16:
        return s
    return f"{s[:6]}...{s[-6:]}"


# ─── MLE ───

def serialize_dense_mle(mle):
    """DenseMLE → list[str]"""
    return serialize_fr_list(mle.table())


def deserialize_dense_mle(data, field=FR):
    """list[str] → DenseMLE"""
    return DenseMLE(deserialize_fr_list(data, field))


def serialize_sparse_mle(mle):
    """SparseMLE → {"num_variables", "entries": [[index, str], ...]}"""
    return {
        "num_variables": mle.num_variables(),
        "entries": [[index, str(int(value))] for index, value in mle.sparse_table()],
    }


def deserialize_sparse_mle(data, field=FR):
    return SparseMLE(
        data["num_variables"],
        [(index, field(int(value))) for index, value in data["entries"]],
        field=field,
    )


# ─── ListOfProducts ───

def serialize_list_of_products(polynomial):
    """ListOfProducts → dict (아레나 테이블 + (계수, 핸들) 목록)"""
    return {
        "modulus": serialize_field(polynomial.field),
        "num_variables": polynomial.num_variables,
        "mles": [serialize_fr_list(mle.table()) for mle in polynomial.flattened_ml_extensions],
        "products": [[serialize_fr(c), list(handles)] for c, handles in polynomial.products],
    }


def deserialize_list_of_products(data):
    field = deserialize_field(data.get("modulus"))
    polynomial = ListOfProducts(data["num_variables"])
    for table in data["mles"]:
        polynomial.add_mle(deserialize_dense_mle(table, field))
    for coefficient, handles in data["products"]:
        polynomial.add_product(handles, deserialize_fr(coefficient, field))
    return polynomial


# ─── 증명 ───

def serialize_prover_message(msg):
    return serialize_fr_list(msg.evaluations)


def deserialize_prover_message(data, field=FR):
    return ProverMessage(deserialize_fr_list(data, field))


def serialize_proof(proof):
    """Proof → list[list[str]]"""
    return [serialize_prover_message(msg) for msg in proof]


def deserialize_proof(data, field=FR):
    return Proof([deserialize_prover_message(msg, field) for msg in data])


def serialize_subclaim(subclaim):
    return {
        "point": serialize_fr_list(subclaim.point),
        "expected_evaluation": serialize_fr(subclaim.expected_evaluation),
    }


def deserialize_subclaim(data, field=FR):
    return SubClaim(deserialize_fr_list(data["point"], field),
                    deserialize_fr(data["expected_evaluation"], field))


# ─── GKR ───

def serialize_gkr_claim(claim):
    return {"g": serialize_fr_list(claim.g), "sum": serialize_fr(claim.sum)}


def deserialize_gkr_claim(data, field=FR):
    return GKRClaim(deserialize_fr_list(data["g"], field), deserialize_fr(data["sum"], field))


def serialize_gkr_proof(proof):
    return {
        "phase1": [serialize_prover_message(m) for m in proof.phase1_sumcheck_msgs],
        "phase2": [serialize_prover_message(m) for m in proof.phase2_sumcheck_msgs],
    }


def deserialize_gkr_proof(data, field=FR):
    return GKRProof(
        [deserialize_prover_message(m, field) for m in data["phase1"]],
        [deserialize_prover_message(m, field) for m in data["phase2"]],
    )


def serialize_gkr_subclaim(subclaim):
    return {
        "u": serialize_fr_list(subclaim.u),
        "v": serialize_fr_list(subclaim.v),
        "expected_evaluation": serialize_fr(subclaim.expected_evaluation),
    }


def deserialize_gkr_subclaim(data, field=FR):
    return GKRRoundSubClaim(
        deserialize_fr_list(data["u"], field),
        deserialize_fr_list(data["v"], field),
        deserialize_fr(data["expected_evaluation"], field),
    )
