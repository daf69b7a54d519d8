import asyncio

from ping_monitor import ping
from ping_monitor.ping import extract_ip, ping_host

LINUX_OUTPUT = (
    "PING example.com (93.184.216.34) 56(84) bytes of data.\n"
    "64 bytes from 93.184.216.34: icmp_seq=1 ttl=56 time=11.2 ms\n"
    "\n--- example.com ping statistics ---\n"
    "1 packets transmitted, 1 received, 0% packet loss, time 0ms\n"
)


class FakeProcess:
    def __init__(self, output: str, returncode: int, delay: float = 0.0):
        self.output = output
        self.returncode = returncode
        self.delay = delay
        self.killed = False
        self.reaped = False

    async def communicate(self):
        await asyncio.sleep(self.delay)
        return self.output.encode(), None

    def kill(self):
        self.killed = True

    async def wait(self):
        self.reaped = True
        return -9


def fake_exec(proc, calls=None):
    async def _exec(*args, **kwargs):
        if calls is not None:
            calls.append(args)
        return proc

    return _exec


def test_extract_ip():
    assert extract_ip(LINUX_OUTPUT) == "93.184.216.34"
    assert extract_ip("no address here") is None
    assert extract_ip("PING x () bytes") is None


def test_ping_success_extracts_ip(monkeypatch):
    calls = []
    monkeypatch.setattr(
        ping.asyncio, "create_subprocess_exec", fake_exec(FakeProcess(LINUX_OUTPUT, 0), calls)
    )
    res = asyncio.run(ping_host("example.com", 3))
    assert res.ok
    assert res.ip == "93.184.216.34"
    assert calls[0] == ("ping", "-n", "-c", "1", "-W", "3", "example.com")


def test_ping_success_without_ip_stays_up(monkeypatch):
    monkeypatch.setattr(
        ping.asyncio, "create_subprocess_exec", fake_exec(FakeProcess("pong", 0))
    )
    res = asyncio.run(ping_host("example.com", 1))
    assert res.ok
    assert res.ip is None


def test_ping_failure_exit_code(monkeypatch):
    out = "1 packets transmitted, 0 received, 100% packet loss"
    monkeypatch.setattr(
        ping.asyncio, "create_subprocess_exec", fake_exec(FakeProcess(out, 1))
    )
    res = asyncio.run(ping_host("10.255.255.1", 1))
    assert not res.ok
    assert res.ip is None
    assert res.error == "timeout"


def test_ping_timeout_floor_is_one_second(monkeypatch):
    calls = []
    monkeypatch.setattr(
        ping.asyncio, "create_subprocess_exec", fake_exec(FakeProcess("", 0), calls)
    )
    asyncio.run(ping_host("h", 0))
    assert calls[0][5] == "1"


def test_ping_hard_deadline_kills_process(monkeypatch):
    proc = FakeProcess(LINUX_OUTPUT, 0, delay=5)
    monkeypatch.setattr(ping.asyncio, "create_subprocess_exec", fake_exec(proc))
    monkeypatch.setattr(ping.config, "PING_GRACE_SECONDS", -0.95)
    res = asyncio.run(ping_host("example.com", 1))
    assert not res.ok
    assert proc.killed
    assert proc.reaped


def test_ping_launch_failure_is_down(monkeypatch):
    async def _exec(*args, **kwargs):
        raise PermissionError("not allowed")

    monkeypatch.setattr(ping.asyncio, "create_subprocess_exec", _exec)
    res = asyncio.run(ping_host("example.com", 1))
    assert not res.ok
    assert res.error == "launch failed"
