from common.workers.launcher import WorkerLauncher


class FakeWorker:
    """Worker double recording lifecycle calls."""

    instances = []

    def __init__(self, name="fake", fail=False):
        self.name = name
        self.fail = fail
        self.calls = []
        FakeWorker.instances.append(self)

    async def start(self):
        self.calls.append("start")
        if self.fail:
            raise RuntimeError("worker crashed")

    async def stop(self):
        self.calls.append("stop")


class TestWorkerLauncher:
    def setup_method(self):
        FakeWorker.instances.clear()

    def test_runs_worker_and_stops_it(self):
        WorkerLauncher().run(
            worker_factory=FakeWorker,
            worker_name="Fake Worker",
            factory_kwargs={"name": "sweep"},
        )

        worker = FakeWorker.instances[0]
        assert worker.name == "sweep"
        assert worker.calls == ["start", "stop"]

    def test_failing_worker_is_still_stopped(self):
        WorkerLauncher().run(
            worker_factory=FakeWorker,
            worker_name="Fake Worker",
            factory_args=("crashy", True),
        )

        assert FakeWorker.instances[0].calls == ["start", "stop"]
