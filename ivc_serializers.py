"""
IVC 데이터 직렬화/역직렬화 헬퍼
================================

TinyDB와 JSON 응답에 담을 수 있는 형태로 증명 산출물을 변환한다.
FR, G1, Proof, ProofArtifact, StepReport.

G1 점은 아핀 좌표 [str, str] 로 저장하고, 무한원점은 None 이다.
"""

from ivc.plonk.field import FR, Z1, ec_normalize, g1_from_affine
from ivc.plonk.prover import Proof, PROOF_POINTS, PROOF_SCALARS
from ivc.plonk.circuit_data import ProofArtifact


# ─── FR ───

def serialize_fr(val):
    """FR → str(int)"""
    return str(int(val))


def deserialize_fr(s):
    """str(int) → FR"""
    return FR(int(s))


def serialize_fr_list(lst):
    return [serialize_fr(v) for v in lst]


def deserialize_fr_list(data):
    return [deserialize_fr(s) for s in data]


# ─── G1 point ───

def serialize_g1(point):
    """G1 point → [str, str] or None (무한원점)"""
    affine = ec_normalize(point)
    if affine is None:
        return None
    return [str(int(affine[0])), str(int(affine[1]))]


def deserialize_g1(data):
    """[str, str] or None → G1 point"""
    if data is None:
        return Z1
    return g1_from_affine(int(data[0]), int(data[1]))


# ─── Proof ───

def serialize_proof(proof):
    """Proof → dict"""
    data = {name: serialize_g1(getattr(proof, name)) for name in PROOF_POINTS}
    data.update({name: serialize_fr(getattr(proof, name)) for name in PROOF_SCALARS})
    return data


def deserialize_proof(data):
    """dict → Proof. 빠진 필드는 None으로 남는다 (is_well_formed()가 거른다)."""
    if not isinstance(data, dict):
        raise TypeError(f"proof must be a dict, got {type(data).__name__}")
    proof = Proof()
    for name in PROOF_POINTS:
        if name in data:
            setattr(proof, name, deserialize_g1(data[name]))
    for name in PROOF_SCALARS:
        if data.get(name) is not None:
            setattr(proof, name, deserialize_fr(data[name]))
    return proof


def serialize_artifact(artifact):
    """ProofArtifact → dict"""
    return {
        "proof": serialize_proof(artifact.proof),
        "public_inputs": serialize_fr_list(artifact.public_inputs),
    }


def deserialize_artifact(data):
    """dict → ProofArtifact"""
    return ProofArtifact(
        deserialize_proof(data["proof"]),
        tuple(deserialize_fr_list(data["public_inputs"])),
    )


# ─── 표시용 ───

def fr_short(val):
    """FR → 축약 문자열 (UI 표시용)"""
    if val is None:
        return "None"
    s = str(int(val))
    if len(s) <= 10:
        return s
    return s[:4] + "..." + s[-4:]


def verifier_key_summary(verifier_key):
    return {
        "n": verifier_key.n,
        "num_public_inputs": verifier_key.num_public_inputs,
        "commitment": [fr_short(x) for x in verifier_key.commitment()],
    }


def serialize_public_inputs(values):
    """PublicInputLayout.unpack() 결과 → dict"""
    return {
        "initial_state": list(values.initial_state),
        "current_state": list(values.current_state),
        "counter": values.counter,
        "condition": values.condition,
        "verifier_key": [hex(x) for x in values.verifier_key],
    }
