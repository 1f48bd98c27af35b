"""
PLONK 전처리기 (Preprocessor)
===============================

회로 구조(셀렉터, 순열)를 다항식으로 바꾸고 커밋하여
Prover용 데이터와 Verifier용 검증 키(VerifierKey)를 만든다.

**전처리 출력물**:
  - 셀렉터 커밋먼트: [q_L]₁, [q_R]₁, [q_O]₁, [q_M]₁, [q_C]₁
  - 순열 커밋먼트: [S_σ1]₁, [S_σ2]₁, [S_σ3]₁
  - 도메인 정보: n, ω (단위근)
  - 셀렉터/순열 다항식 자체 (Prover용)

**검증 키 커밋먼트 (다이제스트)**:
  검증 키의 8개 커밋먼트 + n + 공개 입력 수를 SHA-256으로 해싱해
  W개의 필드 원소로 줄인 값. 재귀 회로는 이 W개 원소를 공개 입력 꼬리에 싣고,
  외부 일관성 검사는 이 값을 정규 회로의 값과 비교한다.
  같은 제약 구조 → 같은 다이제스트, 제약이 하나라도 다르면 다른 다이제스트.

사용 예시:
    >>> preprocessed, vk = preprocess(selectors, sigma, num_pis, srs, width=2)
    >>> vk.commitment()  # (FR, FR)
"""

import hashlib
import logging

from ivc.plonk.field import FR, CURVE_ORDER, get_root_of_unity, get_roots_of_unity, ec_normalize
from ivc.plonk.polynomial import Polynomial
from ivc.plonk.kzg import commit
from ivc.plonk.permutation import build_permutation_polynomials

logger = logging.getLogger(__name__)

VK_COMMITMENT_NAMES = (
    "q_l_comm", "q_r_comm", "q_o_comm", "q_m_comm", "q_c_comm",
    "s_sigma1_comm", "s_sigma2_comm", "s_sigma3_comm",
)


class VerifierKey:
    """검증자가 필요로 하는 회로 데이터 (불변, 여러 증명이 공유).

    속성:
        n: 도메인 크기
        omega: n차 원시 단위근
        num_public_inputs: 공개 입력 수
        commitment_width: 다이제스트 원소 수 W
        q_l_comm ... s_sigma3_comm: G1 점 (VK_COMMITMENT_NAMES 순서)
    """

    def __init__(self, n, num_public_inputs, commitments, commitment_width):
        self.n = n
        self.omega = get_root_of_unity(n)
        self.num_public_inputs = num_public_inputs
        self.commitment_width = commitment_width
        for name in VK_COMMITMENT_NAMES:
            setattr(self, name, commitments[name])
        self._digest = None

    def commitments(self):
        return [getattr(self, name) for name in VK_COMMITMENT_NAMES]

    def commitment(self):
        """검증 키 커밋먼트: W개의 FR 원소 (튜플).

        원소 i = SHA-256("ivc-vk" ‖ i ‖ n ‖ 공개입력수 ‖ 아핀 좌표들) mod r
        """
        if self._digest is None:
            body = bytearray()
            body.extend(self.n.to_bytes(8, "big"))
            body.extend(self.num_public_inputs.to_bytes(8, "big"))
            for point in self.commitments():
                affine = ec_normalize(point)
                if affine is None:
                    body.extend(b"\x00" * 64)
                else:
                    body.extend(int(affine[0]).to_bytes(32, "big"))
                    body.extend(int(affine[1]).to_bytes(32, "big"))
            digest = []
            for i in range(self.commitment_width):
                h = hashlib.sha256(b"ivc-vk" + i.to_bytes(4, "big") + bytes(body)).digest()
                digest.append(FR(int.from_bytes(h, "big") % CURVE_ORDER))
            self._digest = tuple(digest)
        return self._digest

    def __eq__(self, other):
        if not isinstance(other, VerifierKey):
            return NotImplemented
        return self.commitment() == other.commitment()

    def __hash__(self):
        return hash(tuple(int(x) for x in self.commitment()))

    def __repr__(self):
        digest = ", ".join(hex(int(x))[:12] for x in self.commitment())
        return f"VerifierKey(n={self.n}, num_public_inputs={self.num_public_inputs}, digest=[{digest}])"


class PreprocessedData:
    """Prover가 쓰는 전처리 데이터.

    속성 (도메인):
        n, omega, domain: 도메인 크기, 단위근, [1, ω, ..., ω^{n-1}]

    속성 (다항식):
        q_l_poly, q_r_poly, q_o_poly, q_m_poly, q_c_poly
        s_sigma1_poly, s_sigma2_poly, s_sigma3_poly

    속성 (회로 정보):
        sigma: 순열 배열 (길이 3n)
        num_public_inputs: 공개 입력 수
        verifier_key: 같은 회로의 VerifierKey
    """
    pass


def preprocess(selectors, sigma, num_public_inputs, srs, commitment_width):
    """셀렉터 벡터와 순열로부터 전처리 데이터와 검증 키를 만든다.

    Args:
        selectors: (q_L, q_R, q_O, q_M, q_C) 평가값 리스트 (각각 길이 n)
        sigma: 순열 배열 (길이 3n)
        num_public_inputs: 공개 입력 수
        srs: SRS
        commitment_width: 검증 키 다이제스트 원소 수

    Returns:
        tuple: (PreprocessedData, VerifierKey)
    """
    result = PreprocessedData()

    # ── 1단계: 도메인 ──
    n = len(selectors[0])
    result.n = n
    result.omega = get_root_of_unity(n)
    result.domain = get_roots_of_unity(n)

    # ── 2단계: 셀렉터 다항식 ──
    q_l_evals, q_r_evals, q_o_evals, q_m_evals, q_c_evals = selectors
    result.q_l_poly = Polynomial.from_evaluations(q_l_evals, result.omega)
    result.q_r_poly = Polynomial.from_evaluations(q_r_evals, result.omega)
    result.q_o_poly = Polynomial.from_evaluations(q_o_evals, result.omega)
    result.q_m_poly = Polynomial.from_evaluations(q_m_evals, result.omega)
    result.q_c_poly = Polynomial.from_evaluations(q_c_evals, result.omega)

    # ── 3단계: 순열 다항식 ──
    result.sigma = sigma
    s1_evals, s2_evals, s3_evals = build_permutation_polynomials(sigma, n, result.domain)
    result.s_sigma1_poly = Polynomial.from_evaluations(s1_evals, result.omega)
    result.s_sigma2_poly = Polynomial.from_evaluations(s2_evals, result.omega)
    result.s_sigma3_poly = Polynomial.from_evaluations(s3_evals, result.omega)

    # ── 4단계: KZG 커밋 → 검증 키 ──
    commitments = {
        "q_l_comm": commit(result.q_l_poly, srs),
        "q_r_comm": commit(result.q_r_poly, srs),
        "q_o_comm": commit(result.q_o_poly, srs),
        "q_m_comm": commit(result.q_m_poly, srs),
        "q_c_comm": commit(result.q_c_poly, srs),
        "s_sigma1_comm": commit(result.s_sigma1_poly, srs),
        "s_sigma2_comm": commit(result.s_sigma2_poly, srs),
        "s_sigma3_comm": commit(result.s_sigma3_poly, srs),
    }

    result.num_public_inputs = num_public_inputs
    result.verifier_key = VerifierKey(n, num_public_inputs, commitments, commitment_width)
    logger.debug("preprocessed circuit n=%d vk=%r", n, result.verifier_key)
    return result, result.verifier_key
