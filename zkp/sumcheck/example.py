"""
Sum-check / GKR 데모와 예제 입력 생성기
=========================================

이 스크립트는 sum-check 프로토콜과 GKR 라운드 축약의 전체 흐름을 시연한다.
테스트와 Flask 데모가 같은 예제 생성기를 사용한다.

실행:
    python -m zkp.sumcheck.example

흐름:
    1. 무작위 곱의 합 다항식 P 생성, 참인 합 S 계산
    2. 비대화식 sum-check 증명 생성 / 검증
    3. 남은 주장 P(r) = e 를 직접 평가하여 확인
    4. F97 위의 3차원 GKR 라운드 증명 생성 / 검증
"""

import random

from zkp.gkr.round_sumcheck import generate_claim_and_proof, verify_claim
from zkp.sumcheck.field import FR, make_field, random_element
from zkp.sumcheck.mle import DenseMLE, SparseMLE
from zkp.sumcheck.products import ListOfProducts
from zkp.sumcheck.protocol import extract_sum, prove, verify


# 데모 기본값
DEFAULT_NUM_VARIABLES = 3
DEFAULT_NUM_PRODUCTS = 2
DEFAULT_MULTIPLICANDS = (2, 3)
DEFAULT_SEED = 12345

GKR_EXAMPLE_DIM = 3
GKR_EXAMPLE_MODULUS = 97


def random_dense_mle(num_variables, field, rng):
    return DenseMLE([random_element(field, rng) for _ in range(1 << num_variables)])


def random_sparse_mle(num_variables, num_nonzero, field, rng):
    """0이 아닌 원소 num_nonzero개를 가진 무작위 희소 MLE."""
    size = 1 << num_variables
    indices = rng.sample(range(size), min(num_nonzero, size))
    entries = []
    for index in indices:
        value = field(rng.randrange(1, field.field_modulus))
        entries.append((index, value))
    return SparseMLE(num_variables, entries, field=field)


def random_list_of_products(num_variables, multiplicands_range=DEFAULT_MULTIPLICANDS,
                            num_products=DEFAULT_NUM_PRODUCTS, field=FR, rng=None):
    """무작위 곱의 합 다항식과 그 참인 합을 만든다.

    Args:
        num_variables: 변수 개수
        multiplicands_range: (최소, 최대) 곱 항 길이
        num_products: 곱 항 개수
        field: 체 클래스
        rng: random.Random (기본값: DEFAULT_SEED로 시드)

    Returns:
        (ListOfProducts, 참인 합)
    """
    if rng is None:
        rng = random.Random(DEFAULT_SEED)
    low, high = multiplicands_range
    polynomial = ListOfProducts(num_variables)
    for _ in range(num_products):
        count = rng.randint(low, high)
        mles = [random_dense_mle(num_variables, field, rng) for _ in range(count)]
        coefficient = random_element(field, rng)
        polynomial.add_product_of_mles(mles, coefficient)
    return polynomial, polynomial.sum_over_hypercube()


def gkr_example(dim=GKR_EXAMPLE_DIM, modulus=GKR_EXAMPLE_MODULUS, seed=DEFAULT_SEED):
    """작은 체 위의 GKR 예제 (f1, f2, f3, g).

    f1은 3·dim 변수에 원소 2^dim개가 0이 아닌 희소 MLE이다.
    """
    field = make_field(modulus)
    rng = random.Random(seed)
    f1 = random_sparse_mle(3 * dim, 1 << dim, field, rng)
    f2 = random_dense_mle(dim, field, rng)
    f3 = random_dense_mle(dim, field, rng)
    g = [random_element(field, rng) for _ in range(dim)]
    return f1, f2, f3, g


def main():
    print("=" * 60)
    print("  Multilinear Sum-check Demo")
    print("=" * 60)

    # ── 1. 다항식 생성 ──
    print("\n[1] 무작위 곱의 합 다항식 생성...")
    polynomial, claimed_sum = random_list_of_products(DEFAULT_NUM_VARIABLES)
    info = polynomial.info()
    print(f"    변수 개수: {info.num_variables}")
    print(f"    최대 곱 항 길이: {info.max_multiplicands}")
    print(f"    곱 항 개수: {len(polynomial.products)}")
    print(f"    참인 합 S = {int(claimed_sum)}")

    # ── 2. 증명 생성 ──
    print("\n[2] sum-check 증명 생성...")
    proof = prove(polynomial)
    for k, msg in enumerate(proof, start=1):
        print(f"    라운드 {k}: {[int(v) for v in msg.evaluations]}")
    print(f"    증명 크기: {len(proof.to_bytes())} bytes")

    # ── 3. 검증 ──
    print("\n[3] 검증...")
    subclaim = verify(info, extract_sum(proof), proof)
    ok = polynomial.evaluate(list(subclaim.point)) == subclaim.expected_evaluation
    print(f"    남은 주장 P(r) = e: {'✓' if ok else '✗'}")

    # ── 4. GKR 라운드 ──
    print(f"\n[4] GKR 라운드 (dim={GKR_EXAMPLE_DIM}, F{GKR_EXAMPLE_MODULUS})...")
    f1, f2, f3, g = gkr_example()
    claim, gkr_proof = generate_claim_and_proof(f1, f2, f3, g)
    gkr_subclaim = verify_claim(claim, gkr_proof)
    print(f"    주장된 합: {int(claim.sum)}")
    print(f"    u = {[int(x) for x in gkr_subclaim.u]}, v = {[int(x) for x in gkr_subclaim.v]}")
    ok = gkr_subclaim.verify_subclaim(f1, f2, f3, g)
    print(f"    f1(g,u,v)·f2(u)·f3(v) = e: {'✓' if ok else '✗'}")


if __name__ == "__main__":
    main()
