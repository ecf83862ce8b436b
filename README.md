# nodoplugins

Pure-Python logic behind a set of Nodo home-automation plugins: parsing and
formatting of plugin command lines, decoding of raw 433 MHz RF pulse trains,
and the state machines that drive RGB LEDs, servos, pulse counters, Wiegand
tag readers and a PID controller. Every component works on plain values you
feed it.

## Installation

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## What is inside

| Module | Purpose |
| --- | --- |
| `nodoplugins.events` | `NodoEvent`, `EventType`, `CommandError` and the argument helpers `get_argv`, `parse_int`, `contains_keyword` |
| `nodoplugins.distance` | `echo_to_distance` (HC-SR04 echo time to centimetres), `parse_distance` / `format_distance` for `HCSR04_Read` |
| `nodoplugins.rgbled` | `RGBLed` fading state, `RGBLedMode` flags, `parse_rgbled` / `format_rgbled` for `RGBLed` and `RGBLedSend` |
| `nodoplugins.extwiredout` | `pcf8574_target`, `pcf8574_apply`, `parse_ext_wired_out` / `format_ext_wired_out` for `ExtWiredOut` |
| `nodoplugins.expanders` | `InputExpanderMonitor`, `pcf8591_target`, commands `ExtWiredIn` and `ExtWiredAnalog` |
| `nodoplugins.servo` | `ServoController` pulse-width bookkeeping, `us_to_ticks`, `parse_servo` / `format_servo` |
| `nodoplugins.pulsecounter` | `PulseCounter` for four inputs, `parse_pulse` / `format_pulse` |
| `nodoplugins.wiegand` | `WiegandReader` for Wiegand-26 tags, `parse_rfidwg` / `format_rfidwg` |
| `nodoplugins.syslog` | `parse_syslog` / `format_syslog` for `SysLog` |
| `nodoplugins.ping` | `parse_ping` / `format_ping` with a dotted IPv4 address, `ip_octets` |
| `nodoplugins.rfsignal` | `RawSignal`, `Decoded`, `alecto_crc8` and the Nodo / KAKU decoders |
| `nodoplugins.rfweather` | Alecto V1/V2/V3, Oregon V2, Flamengo FA20RF and Home Easy decoders |
| `nodoplugins.rfscanner` | `RFScanner` protocol recognition and statistics, `signal_ratio` |
| `nodoplugins.pid` | `PIDController` with analog and digital (duty-cycle) output, `PIDMode`, `PIDParameter`, `parse_pid` / `format_pid` |

Each `parse_*` function returns `None` when the line names another command,
and raises `CommandError` when it names its command with invalid arguments.

## Examples

Parsing and formatting a command:

```python
from nodoplugins.servo import parse_servo, format_servo

event = parse_servo("Servo 2,90")
print(format_servo(event))      # Servo 2,90
```

```python
from nodoplugins.ping import parse_ping, format_ping

event = parse_ping("Ping 10,8.8.8.8")
print(hex(event.par2))          # 0x8080808
print(format_ping(event))       # Ping 10,8.8.8.8
```

Invalid input raises `CommandError`:

```python
from nodoplugins.events import CommandError
from nodoplugins.servo import parse_servo

try:
    parse_servo("Servo 9,90")
except CommandError as exc:
    print(exc)                  # port out of range: 9
```

Recognising a captured RF pulse train; each decoder returns a `Decoded`
record or `None`, and `RFScanner` tries them all in turn:

```python
from nodoplugins.rfsignal import RawSignal
from nodoplugins.rfscanner import RFScanner

scanner = RFScanner()
signal = RawSignal(pulses=[100] * 10, multiply=25)
print(scanner.analyze(signal, 1, now_ms=500))   # +500 Pulses:10 Protocol: ?
print(scanner.counts["Unknown"])                # 1
```

Running one PID step:

```python
from nodoplugins.pid import PIDController

pid = PIDController()
print(pid.compute(setpoint=21.0, measured=19.5, now_ms=1000))   # 1.5
```

## What it does not do

The package does not talk to any device: there is no I2C, serial, RF,
PWM or network input and output, and no pin tables for particular boards.
Readings such as input port bytes, echo times, pulse trains and clock values
are passed in by the caller, and results come back as values, `NodoEvent`
records or report lines for the caller to act on.