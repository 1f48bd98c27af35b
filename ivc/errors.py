"""
IVC 오류 타입
==============

체인 구축/증명/검증 중 발생하는 모든 치명적 오류의 계층.
모두 현재 작업을 중단시키며 경고로 격하되지 않는다.

  IVCError
  ├── ShapeMismatch           회로/증명 형태가 기대한 CircuitDescriptor와 다름 (빌드 시)
  ├── CircuitBuildError       빌드 규칙 위반 (검증 키 공개 입력 이중 등록 등)
  ├── StabilizationFailure    descriptor 고정점이 반복 한도 안에 수렴하지 않음 (시작 시)
  ├── ConstraintUnsatisfied   증인이 제약을 만족하지 못함 (증명 시)
  ├── VerifierDataMismatch    증명에 박힌 검증 키 커밋먼트가 정규 회로와 다름
  └── ProofVerificationFailed 증명 자체가 정규 검증 키로 검증되지 않음

각 오류는 진단용 문맥을 가진다:
    step:  체인 단계 번호 (0 = base). 체인 밖이면 None
    check: 실패한 검사 이름 (예: "verifier_key_commitment", "gate:select")
"""


class IVCError(ValueError):
    """모든 IVC 오류의 기반 클래스."""

    def __init__(self, message, step=None, check=None):
        super().__init__(message)
        self.message = message
        self.step = step
        self.check = check

    def at_step(self, step):
        """체인 단계 번호를 붙인다 (이미 있으면 유지)."""
        if self.step is None:
            self.step = step
        return self

    def __str__(self):
        context = []
        if self.step is not None:
            context.append(f"step={self.step}")
        if self.check is not None:
            context.append(f"check={self.check}")
        if not context:
            return self.message
        return f"{self.message} [{', '.join(context)}]"


class ShapeMismatch(IVCError):
    pass


class CircuitBuildError(IVCError):
    pass


class StabilizationFailure(IVCError):
    pass


class ConstraintUnsatisfied(IVCError):
    pass


class VerifierDataMismatch(IVCError):
    pass


class ProofVerificationFailed(IVCError):
    pass
