"""
Fiat-Shamir 트랜스크립트
=========================

prover와 verifier가 같은 순서로 메시지를 흡수하면 같은 챌린지를 얻는다.

  bind_circuit   검증 키 다이제스트 + 공개 입력    (라운드 전, 양쪽 공통)
  round1..3      [a] [b] [c] → β γ → [z] → α → [t_*] → ζ
  round4..5      ā b̄ c̄ s̄_σ1 s̄_σ2 z̄_ω → v → r̄ [W_ζ] [W_ζω] → u (verifier만)

모든 흡수는 "레이블 길이 ∥ 레이블 ∥ 데이터" 로 들어가므로 레이블이 다르면
같은 값이라도 다른 챌린지가 나온다. 챌린지 해시는 다시 흡수되어 다음 챌린지와 이어진다.
"""

import hashlib

from ivc.plonk.field import FR, CURVE_ORDER, ec_normalize


def _scalar_bytes(value):
    return (int(value) % CURVE_ORDER).to_bytes(32, "big")


class Transcript:
    """SHA-256 누적 해시."""

    def __init__(self, label=b"ivc-plonk"):
        self._hasher = hashlib.sha256()
        self._absorb(b"init", label)

    def _absorb(self, label, data):
        self._hasher.update(len(label).to_bytes(2, "big"))
        self._hasher.update(label)
        self._hasher.update(data)

    def append_scalar(self, label, scalar):
        self._absorb(label, _scalar_bytes(scalar))

    def append_scalars(self, label, scalars):
        """길이를 앞에 붙인다. [1, 2] + [3] 과 [1] + [2, 3] 은 다르다."""
        scalars = list(scalars)
        data = len(scalars).to_bytes(8, "big") + b"".join(_scalar_bytes(s) for s in scalars)
        self._absorb(label, data)

    def append_point(self, label, point):
        """G1 점은 아핀 좌표로 흡수한다. 무한원점은 0 64바이트."""
        affine = ec_normalize(point)
        if affine is None:
            data = bytes(64)
        else:
            data = b"".join(int(coord).to_bytes(32, "big") for coord in affine)
        self._absorb(label, data)

    def bind_circuit(self, verifier_key, public_inputs):
        self.append_scalars(b"verifier_key", verifier_key.commitment())
        self.append_scalars(b"public_inputs", public_inputs)

    def challenge_scalar(self, label):
        self._absorb(label, b"challenge")
        digest = self._hasher.copy().digest()
        self._absorb(b"digest", digest)
        return FR(int.from_bytes(digest, "big") % CURVE_ORDER)
