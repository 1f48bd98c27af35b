"""
검증 키 일관성 검사 (Verifier-Data Consistency Check)
======================================================

회로 밖에서, 증명을 받아들이기 전에 두 가지를 직접 확인한다.

  1. 공개 입력 꼬리 W칸 == 정규 회로 VerifierKey.commitment()
  2. 증명 자체가 정규 검증 키와 정규 descriptor로 검증된다

회로 안의 가젯도 1을 제약하지만, 신뢰할 수 없는 체인에서 온 증명을 받는 쪽은
그 제약이 제대로 배선되었는지 스스로 확인한 적이 없으므로 이 검사를 따로 한다.
"""

import logging

from ivc.errors import ProofVerificationFailed, ShapeMismatch, VerifierDataMismatch
from ivc.plonk.srs import SRS
from ivc.plonk.verifier import verify

logger = logging.getLogger(__name__)


def check_cyclic_proof_verifier_data(artifact, verifier_key, descriptor):
    """순환 증명이 정규 회로의 것인지 확인한다.

    Args:
        artifact: ProofArtifact
        verifier_key: 정규 회로의 VerifierKey
        descriptor: 정규 회로의 CircuitDescriptor

    Raises:
        ShapeMismatch: 공개 입력 수나 검증 키 모양이 descriptor와 다를 때
        VerifierDataMismatch: 공개 입력에 박힌 검증 키 커밋먼트가 다를 때
        ProofVerificationFailed: 증명이 정규 검증 키로 검증되지 않을 때
    """
    num_public_inputs = len(artifact.public_inputs)
    if num_public_inputs != descriptor.num_public_inputs:
        raise ShapeMismatch(
            f"proof has {num_public_inputs} public inputs, "
            f"descriptor expects {descriptor.num_public_inputs}",
            check="public_input_count",
        )
    if (verifier_key.n != descriptor.num_gates
            or verifier_key.num_public_inputs != descriptor.num_public_inputs):
        raise ShapeMismatch(
            f"{verifier_key!r} does not describe a circuit of shape {descriptor}",
            check="verifier_key_shape",
        )

    expected = verifier_key.commitment()
    embedded = tuple(artifact.public_inputs[-len(expected):])
    if embedded != expected:
        raise VerifierDataMismatch(
            "verifier key commitment embedded in the proof does not match "
            "the canonical circuit",
            check="verifier_key_commitment",
        )

    srs = SRS.for_degree(descriptor.srs_degree, descriptor.config.srs_seed)
    if not verify(artifact.proof, artifact.public_inputs, verifier_key, srs):
        raise ProofVerificationFailed(
            "proof does not verify against the canonical verifier key",
            check="proof_verification",
        )
    logger.debug("proof accepted by consistency check")


def is_valid_cyclic_proof(artifact, verifier_key, descriptor):
    """check_cyclic_proof_verifier_data의 bool 버전."""
    try:
        check_cyclic_proof_verifier_data(artifact, verifier_key, descriptor)
    except (ShapeMismatch, VerifierDataMismatch, ProofVerificationFailed) as e:
        logger.info("cyclic proof rejected: %s", e)
        return False
    return True