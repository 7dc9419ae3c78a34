from common.workers.launcher import WorkerLauncher
from packages.subscriptions.workers.sweep_worker import SweepWorker

if __name__ == "__main__":
    WorkerLauncher().run(worker_factory=SweepWorker, worker_name="Sweep Worker")
