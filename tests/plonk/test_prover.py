"""
PLONK Prover 모듈 테스트
========================

prover 패키지의 5개 라운드(round1~5)와 전체 prove() 함수를 테스트한다.

테스트 회로: x^3 + x + 5 = 35 (x = 3), tests/plonk/conftest.py 참고
"""

import pytest

from ivc.errors import ConstraintUnsatisfied
from ivc.plonk.field import FR, ec_eq
from ivc.plonk.kzg import commit
from ivc.plonk.prover import Proof, ProverState, prove
from ivc.plonk.prover import round1, round2, round3, round4, round5
from ivc.plonk.utils import vanishing_poly_eval
from ivc.plonk.witness import PartialWitness, generate_witness


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="module")
def wires(cubic_circuit):
    data, x, out = cubic_circuit
    pw = PartialWitness()
    pw.set_target(x, 3)
    pw.set_target(out, 35)
    return generate_witness(data.prover_data, pw)


@pytest.fixture(scope="module")
def state(cubic_circuit, wires):
    """5개 라운드를 모두 실행한 ProverState."""
    data, _, _ = cubic_circuit
    a, b, c, public_inputs = wires
    s = ProverState(a, b, c, public_inputs, data.preprocessed, data.srs)
    for rnd in (round1, round2, round3, round4, round5):
        rnd.execute(s)
    return s


# ---------------------------------------------------------------------------
# Witness
# ---------------------------------------------------------------------------

class TestWitness:
    def test_public_inputs(self, wires):
        assert wires[3] == [FR(35)]

    def test_cubic_rows(self, wires):
        a, b, c, _ = wires
        # row 0 = 공개 입력, row 1..4 = x², x³, x³+x, +5
        assert c[0] == FR(35)
        assert (a[1], b[1], c[1]) == (FR(3), FR(3), FR(9))
        assert (a[2], b[2], c[2]) == (FR(9), FR(3), FR(27))
        assert c[3] == FR(30)
        assert c[4] == FR(35)


# ---------------------------------------------------------------------------
# Rounds
# ---------------------------------------------------------------------------

class TestRound1:
    def test_wire_polys_interpolate_values(self, state, wires):
        a, b, c, _ = wires
        for i, w in enumerate(state.domain):
            assert state.a_poly.evaluate(w) == a[i]
            assert state.c_poly.evaluate(w) == c[i]

    def test_wire_polys_are_blinded(self, state):
        assert state.a_poly.degree == state.n + 1

    def test_commitments(self, state):
        assert ec_eq(state.proof.a_comm, commit(state.a_poly, state.srs))

    def test_pi_poly(self, state):
        assert state.pi_poly.evaluate(state.domain[0]) == FR(0) - FR(35)


class TestRound2:
    def test_accumulator_starts_at_one(self, state):
        assert state.z_poly.evaluate(state.domain[0]) == FR(1)

    def test_challenges_set(self, state):
        assert state.beta is not None and state.gamma is not None
        assert state.beta != state.gamma


class TestRound3:
    def test_quotient_split(self, state):
        zeta = FR(987654321)
        n = state.n
        t = (state.t_lo_poly.evaluate(zeta)
             + zeta ** n * state.t_mid_poly.evaluate(zeta)
             + zeta ** (2 * n) * state.t_hi_poly.evaluate(zeta))
        assert t != FR(0)
        assert len(state.t_lo_poly) <= n
        assert len(state.t_mid_poly) <= n

    def test_commitments_within_srs(self, state):
        assert state.t_hi_poly.degree <= state.srs.max_degree
        assert ec_eq(state.proof.t_hi_comm, commit(state.t_hi_poly, state.srs))


class TestRound4:
    def test_evaluations(self, state):
        zeta = state.zeta
        assert state.proof.a_eval == state.a_poly.evaluate(zeta)
        assert state.proof.s_sigma1_eval == state.preprocessed.s_sigma1_poly.evaluate(zeta)
        assert state.proof.z_omega_eval == state.z_poly.evaluate(zeta * state.omega)

    def test_zeta_outside_domain(self, state):
        assert vanishing_poly_eval(state.n, state.zeta) != FR(0)


class TestRound5:
    def test_opening_commitments(self, state):
        assert state.proof.W_zeta_comm is not None
        assert state.proof.W_zeta_omega_comm is not None
        assert state.v is not None

    def test_proof_complete(self, state):
        assert state.build_proof().is_well_formed()


# ---------------------------------------------------------------------------
# prove()
# ---------------------------------------------------------------------------

class TestProve:
    def test_proof_is_well_formed(self, cubic_circuit, wires):
        data, _, _ = cubic_circuit
        a, b, c, public_inputs = wires
        proof = prove(a, b, c, public_inputs, data.preprocessed, data.srs)
        assert isinstance(proof, Proof)
        assert proof.is_well_formed()

    def test_proofs_are_randomized(self, cubic_circuit, wires):
        data, _, _ = cubic_circuit
        a, b, c, public_inputs = wires
        p1 = prove(a, b, c, public_inputs, data.preprocessed, data.srs)
        p2 = prove(a, b, c, public_inputs, data.preprocessed, data.srs)
        assert not ec_eq(p1.a_comm, p2.a_comm)

    def test_unsatisfied_wires_rejected(self, cubic_circuit, wires):
        data, _, _ = cubic_circuit
        a, b, c, public_inputs = wires
        c = list(c)
        c[1] = FR(10)
        with pytest.raises(ConstraintUnsatisfied) as exc:
            prove(a, b, c, public_inputs, data.preprocessed, data.srs)
        assert exc.value.check == "quotient"

    def test_empty_proof_not_well_formed(self):
        assert not Proof().is_well_formed()

    def test_copy_is_independent(self, state):
        clone = state.proof.copy()
        clone.a_eval = clone.a_eval + FR(1)
        assert clone.a_eval != state.proof.a_eval
