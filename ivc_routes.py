"""
IVC Flask Blueprint: 증명 체인 엔드포인트
============================================

체인 하나는 id로 구분되고, DB에는 마지막으로 받아들여진 산출물(head)과
단계별 보고서만 저장한다. 다음 단계 요청은 head를 읽어 resume한 뒤 진행한다.

  GET  /ivc/steps                      단계 함수 목록
  POST /ivc/chains                     새 체인 + base 증명     (step, initial, inputs)
  GET  /ivc/chains/<chain_id>          체인 보고서
  POST /ivc/chains/<chain_id>/step     다음 단계 증명          (inputs)
  POST /ivc/chains/<chain_id>/clear    체인 삭제
  POST /ivc/verify                     외부 산출물 일관성 검사 (step, artifact)

오류는 IVCError 종류와 단계 번호, 검사 이름을 담은 JSON으로 돌려준다.
"""

import logging
import uuid

from flask import Blueprint, jsonify, request
from tinydb import Query

from ivc.errors import IVCError
from ivc.recursion.chain import ProofChain
from ivc.recursion.consistency import check_cyclic_proof_verifier_data
from ivc.recursion.step import STEP_FUNCTIONS, cyclic_circuit_for

from ivc_serializers import (
    serialize_artifact, deserialize_artifact, serialize_public_inputs, verifier_key_summary,
)

logger = logging.getLogger(__name__)

ivc_bp = Blueprint('ivc', __name__, url_prefix='/ivc')

DATA = Query()

# DB는 app.py에서 주입
DB = None


def init_ivc_bp(db):
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


def db_remove_prefix(prefix):
    """prefix로 시작하는 모든 키를 삭제한다."""
    DB.remove(DATA.type.test(lambda t: t.startswith(prefix)))


# ─── 요청 파싱 ───

def _payload():
    """JSON 객체 또는 폼. 폼의 step은 단일 값으로 편다."""
    if request.is_json:
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            raise ValueError("request body must be a JSON object")
        return payload
    payload = request.form.to_dict(flat=False)
    if payload.get("step"):
        payload["step"] = payload["step"][-1]
    return payload


def _step_name(value):
    if value is None:
        return "accumulate"
    if not isinstance(value, str):
        raise ValueError(f"step must be a string, got {value!r}")
    return value


def _int_list(value):
    """정수 또는 정수 문자열 ("5", "5, 7") 리스트. 실수와 bool은 받지 않는다."""
    if value is None:
        return []
    if isinstance(value, (str, int)):
        value = [value]
    if not isinstance(value, list):
        raise ValueError(f"expected a list of integers, got {value!r}")
    result = []
    for item in value:
        if isinstance(item, bool) or not isinstance(item, (str, int)):
            raise ValueError(f"expected an integer, got {item!r}")
        if isinstance(item, str):
            result.extend(int(part) for part in item.replace(",", " ").split())
        else:
            result.append(item)
    return result


def _artifact(payload):
    data = payload.get("artifact")
    if data is None:
        raise ValueError("missing artifact")
    if not isinstance(data, dict) or not isinstance(data.get("proof"), dict):
        raise ValueError("artifact must be an object with a proof object")
    if not isinstance(data.get("public_inputs"), list):
        raise ValueError("artifact public_inputs must be a list")
    try:
        return deserialize_artifact(data)
    except (KeyError, IndexError, TypeError) as e:
        raise ValueError(f"malformed artifact: {e}") from e


def _group_inputs(step, values):
    k = step.num_inputs
    if k == 0:
        if values:
            raise ValueError(f"step {step.name} takes no inputs")
        return ()
    if len(values) != k:
        raise ValueError(f"step {step.name} takes {k} input(s), got {len(values)}")
    return tuple(values)


def _circuit(step_name):
    if step_name not in STEP_FUNCTIONS:
        raise ValueError(f"unknown step function {step_name!r}")
    return cyclic_circuit_for(step_name)


def _store(chain_id, step_name, report):
    reports = db_get(f"ivc.chain.{chain_id}.reports") or []
    reports.append(report.to_dict())
    db_set(f"ivc.chain.{chain_id}.reports", reports)
    db_set(f"ivc.chain.{chain_id}.head", serialize_artifact(report.artifact))
    db_set(f"ivc.chain.{chain_id}.meta", {"step": step_name, "head_step": report.step})


# ─── 오류 ───

@ivc_bp.errorhandler(IVCError)
def handle_ivc_error(e):
    logger.warning("request failed: %s", e)
    return jsonify({
        "error": type(e).__name__,
        "message": e.message,
        "step": e.step,
        "check": e.check,
    }), 422


@ivc_bp.errorhandler(ValueError)
def handle_bad_request(e):
    return jsonify({"error": "BadRequest", "message": str(e)}), 400


# ──────────────────────────────────────────────────────────────
# 엔드포인트
# ──────────────────────────────────────────────────────────────

@ivc_bp.route("/steps")
def list_steps():
    """단계 함수 목록."""
    return jsonify([
        {"name": name, "state_width": cls.state_width, "num_inputs": cls.num_inputs}
        for name, cls in sorted(STEP_FUNCTIONS.items())
    ])


@ivc_bp.route("/chains", methods=["POST"])
def create_chain():
    """새 체인을 만들고 base 증명을 생성한다."""
    payload = _payload()
    step_name = _step_name(payload.get("step"))
    circuit = _circuit(step_name)
    initial = _int_list(payload.get("initial")) or [0] * circuit.step.state_width
    inputs = _group_inputs(circuit.step, _int_list(payload.get("inputs")))

    chain = ProofChain(circuit)
    report = chain.prove_base(initial, inputs)

    chain_id = uuid.uuid4().hex
    _store(chain_id, step_name, report)
    return jsonify({
        "chain_id": chain_id,
        "verifier_key": verifier_key_summary(circuit.verifier_key),
        "report": report.to_dict(),
    }), 201


@ivc_bp.route("/chains/<chain_id>")
def get_chain(chain_id):
    """체인 보고서."""
    meta = db_get(f"ivc.chain.{chain_id}.meta")
    if meta is None:
        return jsonify({"error": "NotFound", "message": f"no chain {chain_id}"}), 404
    return jsonify({
        "chain_id": chain_id,
        "step": meta["step"],
        "head_step": meta["head_step"],
        "reports": db_get(f"ivc.chain.{chain_id}.reports") or [],
        "head": db_get(f"ivc.chain.{chain_id}.head"),
    })


@ivc_bp.route("/chains/<chain_id>/step", methods=["POST"])
def advance_chain(chain_id):
    """head에서 체인을 이어 다음 단계 증명을 생성한다."""
    meta = db_get(f"ivc.chain.{chain_id}.meta")
    if meta is None:
        return jsonify({"error": "NotFound", "message": f"no chain {chain_id}"}), 404
    circuit = _circuit(meta["step"])
    inputs = _group_inputs(circuit.step, _int_list(_payload().get("inputs")))

    chain = ProofChain(circuit)
    chain.resume(deserialize_artifact(db_get(f"ivc.chain.{chain_id}.head")), meta["head_step"])
    report = chain.prove_step(inputs)

    _store(chain_id, meta["step"], report)
    return jsonify({"chain_id": chain_id, "report": report.to_dict()})


@ivc_bp.route("/chains/<chain_id>/clear", methods=["POST"])
def clear_chain(chain_id):
    """체인 데이터를 삭제한다."""
    db_remove_prefix(f"ivc.chain.{chain_id}.")
    return jsonify({"chain_id": chain_id, "cleared": True})


@ivc_bp.route("/verify", methods=["POST"])
def verify_artifact():
    """외부에서 받은 산출물을 정규 회로 기준으로 검사한다."""
    payload = _payload()
    circuit = _circuit(_step_name(payload.get("step")))
    artifact = _artifact(payload)

    check_cyclic_proof_verifier_data(artifact, circuit.verifier_key, circuit.descriptor)
    return jsonify({
        "valid": True,
        "public_inputs": serialize_public_inputs(circuit.unpack(artifact)),
    })
