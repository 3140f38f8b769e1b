import pytest

from quantum_composer.engine.algorithms import PREBUILT_ALGORITHMS, build_template
from quantum_composer.engine.simulator import Simulator


@pytest.mark.parametrize("template_id", sorted(PREBUILT_ALGORITHMS))
def test_templates_build_valid_circuits(template_id):
    circuit = build_template(template_id)
    circuit.validate()
    result = Simulator().run(circuit, shots=0)
    assert sum(result.probabilities.values()) == pytest.approx(1.0)


def test_unknown_template():
    assert build_template("teleportation") is None


def test_bell_template():
    result = Simulator().run(build_template("bell-state"), shots=0)
    assert result.probabilities == pytest.approx({"00": 0.5, "11": 0.5})


def test_deutsch_jozsa_balanced_oracle_never_measures_zero_inputs():
    result = Simulator().run(build_template("deutsch-jozsa"), shots=0)
    assert all(not key.startswith("00") for key in result.probabilities)


def test_grover_finds_marked_state():
    result = Simulator().run(build_template("grover-2qubit"), shots=0)
    best = max(result.probabilities, key=result.probabilities.get)
    assert result.probabilities[best] == pytest.approx(1.0)


def test_templates_build_fresh_circuits():
    a = build_template("ghz-state")
    b = build_template("ghz-state")
    assert a.equivalent(b)
    assert {g.id for g in a.gates}.isdisjoint({g.id for g in b.gates})
