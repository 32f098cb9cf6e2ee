from datetime import timedelta

from irrigation_bridge.domain.controller import PumpController, gate_command, plan_auto
from irrigation_bridge.domain.models import PumpCommandState, Reading
from irrigation_bridge.domain.thresholds import default_thresholds

CFG = default_thresholds()  # soil 30..80


def soil(value: float) -> Reading:
    return Reading(temperature=25.0, humidity=70.0, soil_moisture=value)


# --- rule ordering ---

def test_over_saturated_turns_off_regardless_of_actuator():
    for on in (True, False):
        desired, msgs = plan_auto(soil(85.0), on, CFG)
        assert desired is False
        assert msgs == ["AUTO: soil above max → pump OFF 85.0"]


def test_under_saturated_turns_on():
    desired, msgs = plan_auto(soil(25.0), False, CFG)
    assert desired is True
    assert msgs == ["AUTO: soil below min → pump ON 25.0"]


def test_pumping_stops_at_target():
    # target = 80 - 5
    desired, msgs = plan_auto(soil(75.0), True, CFG)
    assert desired is False
    assert msgs[0].startswith("AUTO: reached target")


def test_pumping_continues_below_target():
    desired, msgs = plan_auto(soil(60.0), True, CFG)
    assert desired is None
    assert msgs == ["AUTO: pumping until target 60.0"]


def test_within_range_and_off_does_nothing():
    desired, msgs = plan_auto(soil(60.0), False, CFG)
    assert desired is None
    assert msgs == ["AUTO: soil within range 60.0"]


def test_target_offset_is_configurable():
    desired, _ = plan_auto(soil(72.0), True, CFG, target_offset=10.0)
    assert desired is False


# --- debounce gate ---

def test_gate_emits_first_command(clock):
    d = gate_command(True, PumpCommandState(), clock())
    assert d.command is not None
    assert d.command.payload == bytes([2, 1])
    assert d.state.last_commanded_on is True
    assert d.state.last_command_time == clock()
    assert d.messages == ("CMD: Pump → ON",)


def test_gate_no_desire_keeps_state(clock):
    state = PumpCommandState()
    d = gate_command(None, state, clock())
    assert d.command is None
    assert d.state is state


def test_debounce_suppresses_change_inside_window(clock):
    ctrl = PumpController(clock=clock)
    first = ctrl.decide(soil(25.0), False, CFG)
    assert first.command.on is True

    clock.advance(500)
    second = ctrl.decide(soil(85.0), True, CFG)
    assert second.command is None
    assert second.messages == ("AUTO: soil above max → pump OFF 85.0",)
    assert ctrl.state.last_commanded_on is True


def test_change_allowed_after_window(clock):
    ctrl = PumpController(clock=clock)
    ctrl.decide(soil(25.0), False, CFG)
    clock.advance(1000)
    d = ctrl.decide(soil(85.0), True, CFG)
    assert d.command.on is False
    assert d.command.payload == bytes([2, 0])


def test_same_command_never_resent(clock):
    ctrl = PumpController(clock=clock)
    assert ctrl.decide(soil(25.0), False, CFG).command is not None
    clock.advance(10_000)
    d = ctrl.decide(soil(25.0), False, CFG)
    assert d.command is None
    assert d.messages == ("AUTO: soil below min → pump ON 25.0",)


def test_backwards_clock_never_rewinds_command_time(clock):
    ctrl = PumpController(clock=clock)
    ctrl.decide(soil(25.0), False, CFG)
    stamped = ctrl.state.last_command_time
    clock.advance(-5000)
    assert ctrl.decide(soil(85.0), True, CFG).command is None
    assert ctrl.state.last_command_time == stamped


def test_manual_request_uses_gate_only(clock):
    ctrl = PumpController(clock=clock)
    d = ctrl.request(True)
    assert d.command.on is True
    assert d.messages == ("MANUAL: pump ON requested", "CMD: Pump → ON")

    clock.advance(100)
    assert ctrl.request(False).command is None


def test_custom_debounce(clock):
    ctrl = PumpController(debounce=timedelta(milliseconds=50), clock=clock)
    ctrl.request(True)
    clock.advance(50)
    assert ctrl.request(False).command is not None
