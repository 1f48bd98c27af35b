"""
Crypto module tests: srs.py, kzg.py, transcript.py, permutation.py, preprocessor.py
"""
import pytest
from ivc.plonk.field import FR, G1, G2, ec_mul, ec_add, ec_eq, ec_is_inf, ec_pairing, get_roots_of_unity
from ivc.plonk.polynomial import Polynomial
from ivc.plonk.srs import SRS
from ivc.plonk.kzg import commit, create_witness, verify_opening
from ivc.plonk.transcript import Transcript
from ivc.plonk.permutation import (
    K1, K2, build_permutation_polynomials, compute_accumulator, batch_inverse,
)
from ivc.plonk.preprocessor import VerifierKey


@pytest.fixture(scope="module")
def srs_small():
    return SRS.generate(max_degree=8, seed=42)


class _StubKey:
    """bind_circuit()가 쓰는 commitment()만 가진 검증 키 대용."""

    def __init__(self, *elements):
        self._elements = tuple(FR(e) for e in elements)

    def commitment(self):
        return self._elements


# =====================================================================
# SRS
# =====================================================================

class TestSRS:
    def test_lengths(self, srs_small):
        assert len(srs_small.g1_powers) == 9
        assert len(srs_small.g2_powers) == 2
        assert srs_small.max_degree == 8

    def test_first_power_is_generator(self, srs_small):
        assert ec_eq(srs_small.g1_powers[0], G1)

    def test_deterministic_with_seed(self):
        a = SRS.generate(max_degree=4, seed=7)
        b = SRS.generate(max_degree=4, seed=7)
        assert all(ec_eq(p, q) for p, q in zip(a.g1_powers, b.g1_powers))

    def test_different_seed_differs(self):
        a = SRS.generate(max_degree=2, seed=7)
        b = SRS.generate(max_degree=2, seed=8)
        assert not ec_eq(a.g1_powers[1], b.g1_powers[1])

    def test_g1_g2_consistency(self, srs_small):
        # e(G2, τ·G1) == e(τ·G2, G1)
        lhs = ec_pairing(srs_small.g2_powers[0], srs_small.g1_powers[1])
        rhs = ec_pairing(srs_small.g2_powers[1], G1)
        assert lhs == rhs

    def test_for_degree_is_shared(self):
        assert SRS.for_degree(4, 99) is SRS.for_degree(4, 99)
        assert SRS.for_degree(4, 99) is not SRS.for_degree(5, 99)


# =====================================================================
# KZG
# =====================================================================

class TestKZGCommit:
    def test_constant_poly(self, srs_small):
        assert ec_eq(commit(Polynomial([7]), srs_small), ec_mul(G1, 7))

    def test_zero_poly_is_infinity(self, srs_small):
        assert ec_is_inf(commit(Polynomial.zero(), srs_small))

    def test_degree_too_large(self, srs_small):
        with pytest.raises(ValueError):
            commit(Polynomial([1] * 10), srs_small)

    def test_minus_one_coefficient(self, srs_small):
        # -1 계수는 스칼라 곱 없이 더해진다
        p = Polynomial([3, -1])
        expected = ec_add(ec_mul(G1, 3), ec_mul(srs_small.g1_powers[1], -1))
        assert ec_eq(commit(p, srs_small), expected)


class TestKZGLinearity:
    def test_additive(self, srs_small):
        p = Polynomial([1, 2, 3])
        q = Polynomial([4, 0, 6, 7])
        lhs = commit(p + q, srs_small)
        rhs = ec_add(commit(p, srs_small), commit(q, srs_small))
        assert ec_eq(lhs, rhs)

    def test_scalar(self, srs_small):
        p = Polynomial([5, 1])
        assert ec_eq(commit(p * 3, srs_small), ec_mul(commit(p, srs_small), 3))


class TestKZGOpening:
    def test_valid_opening(self, srs_small):
        p = Polynomial([1, 2, 3, 4])
        z = FR(7)
        C = commit(p, srs_small)
        proof = create_witness(p, z, srs_small)
        assert verify_opening(C, proof, z, p.evaluate(z), srs_small)

    def test_wrong_evaluation(self, srs_small):
        p = Polynomial([1, 2, 3, 4])
        z = FR(7)
        C = commit(p, srs_small)
        proof = create_witness(p, z, srs_small)
        assert not verify_opening(C, proof, z, p.evaluate(z) + FR(1), srs_small)

    def test_wrong_point(self, srs_small):
        p = Polynomial([1, 2, 3, 4])
        C = commit(p, srs_small)
        proof = create_witness(p, FR(7), srs_small)
        assert not verify_opening(C, proof, FR(8), p.evaluate(FR(7)), srs_small)


# =====================================================================
# Transcript
# =====================================================================

class TestTranscript:
    def test_deterministic(self):
        t1, t2 = Transcript(), Transcript()
        for t in (t1, t2):
            t.append_scalar(b"x", FR(5))
        assert t1.challenge_scalar(b"c") == t2.challenge_scalar(b"c")

    def test_challenges_chain(self):
        t = Transcript()
        t.append_scalar(b"x", FR(5))
        assert t.challenge_scalar(b"c") != t.challenge_scalar(b"c")

    def test_label_separation(self):
        t1, t2 = Transcript(), Transcript()
        t1.append_scalar(b"x", FR(5))
        t2.append_scalar(b"y", FR(5))
        assert t1.challenge_scalar(b"c") != t2.challenge_scalar(b"c")

    def test_scalar_lists_are_length_prefixed(self):
        t1, t2 = Transcript(), Transcript()
        t1.append_scalars(b"a", [FR(1), FR(2)])
        t1.append_scalars(b"a", [FR(3)])
        t2.append_scalars(b"a", [FR(1)])
        t2.append_scalars(b"a", [FR(2), FR(3)])
        assert t1.challenge_scalar(b"c") != t2.challenge_scalar(b"c")

    def test_point_encoding_is_projective_invariant(self):
        P = ec_add(ec_mul(G1, 2), G1)
        Q = ec_mul(G1, 3)
        t1, t2 = Transcript(), Transcript()
        t1.append_point(b"p", P)
        t2.append_point(b"p", Q)
        assert t1.challenge_scalar(b"c") == t2.challenge_scalar(b"c")

    def test_bind_circuit_public_inputs(self):
        key = _StubKey(11, 22)
        t1, t2 = Transcript(), Transcript()
        t1.bind_circuit(key, [FR(1), FR(2)])
        t2.bind_circuit(key, [FR(1), FR(3)])
        assert t1.challenge_scalar(b"beta") != t2.challenge_scalar(b"beta")

    def test_bind_circuit_verifier_key(self):
        t1, t2 = Transcript(), Transcript()
        t1.bind_circuit(_StubKey(11, 22), [FR(1)])
        t2.bind_circuit(_StubKey(11, 23), [FR(1)])
        assert t1.challenge_scalar(b"beta") != t2.challenge_scalar(b"beta")


# =====================================================================
# Permutation
# =====================================================================

class TestBatchInverse:
    def test_matches_single_inverse(self):
        values = [FR(2), FR(3), FR(10), FR(12345)]
        assert batch_inverse(values) == [FR(1) / v for v in values]

    def test_single_value(self):
        assert batch_inverse([FR(4)]) == [FR(1) / FR(4)]

    def test_empty(self):
        assert batch_inverse([]) == []


class TestPermutation:
    def test_identity_sigma_gives_cosets(self):
        n = 4
        domain = get_roots_of_unity(n)
        s1, s2, s3 = build_permutation_polynomials(list(range(3 * n)), n, domain)
        assert s1 == domain
        assert s2 == [K1 * w for w in domain]
        assert s3 == [K2 * w for w in domain]

    def test_swap_positions(self):
        n = 4
        domain = get_roots_of_unity(n)
        sigma = list(range(3 * n))
        # a₀ ↔ c₁
        sigma[0], sigma[2 * n + 1] = 2 * n + 1, 0
        s1, _, s3 = build_permutation_polynomials(sigma, n, domain)
        assert s1[0] == K2 * domain[1]
        assert s3[1] == domain[0]

    def test_identity_accumulator_is_one(self):
        n = 4
        domain = get_roots_of_unity(n)
        vals = [FR(i + 1) for i in range(n)]
        z = compute_accumulator(vals, vals, vals, list(range(3 * n)), n, domain, FR(5), FR(9))
        assert z == [FR(1)] * n

    def test_accumulator_wraps_for_valid_copy(self):
        n = 4
        domain = get_roots_of_unity(n)
        sigma = list(range(3 * n))
        sigma[0], sigma[2 * n + 1] = 2 * n + 1, 0
        a = [FR(7), FR(1), FR(2), FR(3)]
        b = [FR(0)] * n
        c = [FR(4), FR(7), FR(5), FR(6)]
        beta, gamma = FR(11), FR(13)
        z = compute_accumulator(a, b, c, sigma, n, domain, beta, gamma)
        s1, s2, s3 = build_permutation_polynomials(sigma, n, domain)
        # z(ω^{n-1}) · 마지막 행 비율 == 1
        last = n - 1
        num = ((a[last] + beta * domain[last] + gamma)
               * (b[last] + beta * K1 * domain[last] + gamma)
               * (c[last] + beta * K2 * domain[last] + gamma))
        den = ((a[last] + beta * s1[last] + gamma)
               * (b[last] + beta * s2[last] + gamma)
               * (c[last] + beta * s3[last] + gamma))
        assert z[last] * num / den == FR(1)


# =====================================================================
# Preprocessor / VerifierKey
# =====================================================================

class TestPreprocessor:
    def test_domain(self, cubic_circuit):
        data, _, _ = cubic_circuit
        assert data.preprocessed.n == 8
        assert data.verifier_key.n == 8
        assert data.verifier_key.num_public_inputs == 1

    def test_selector_polys_match_rows(self, cubic_circuit):
        data, _, _ = cubic_circuit
        pre = data.preprocessed
        for i, gate in enumerate(data.prover_data.rows):
            w = pre.domain[i]
            assert pre.q_m_poly.evaluate(w) == gate.q_m
            assert pre.q_c_poly.evaluate(w) == gate.q_c

    def test_commitments_match_polys(self, cubic_circuit):
        data, _, _ = cubic_circuit
        assert ec_eq(data.verifier_key.q_l_comm, commit(data.preprocessed.q_l_poly, data.srs))
        assert ec_eq(
            data.verifier_key.s_sigma3_comm,
            commit(data.preprocessed.s_sigma3_poly, data.srs),
        )

    def test_commitment_width(self, cubic_circuit):
        data, _, _ = cubic_circuit
        digest = data.verifier_key.commitment()
        assert len(digest) == data.descriptor.config.vk_commitment_width
        assert all(isinstance(x, FR) for x in digest)

    def test_commitment_deterministic(self, cubic_circuit, make_cubic_circuit):
        data, _, _ = cubic_circuit
        again, _, _ = make_cubic_circuit()
        assert isinstance(again.verifier_key, VerifierKey)
        assert again.verifier_key.commitment() == data.verifier_key.commitment()
        assert again.verifier_key == data.verifier_key
        assert hash(again.verifier_key) == hash(data.verifier_key)

    def test_commitment_changes_with_constraints(self, cubic_circuit, make_cubic_circuit):
        data, _, _ = cubic_circuit
        other, _, _ = make_cubic_circuit(constant=6)
        assert other.descriptor == data.descriptor
        assert other.verifier_key.commitment() != data.verifier_key.commitment()
