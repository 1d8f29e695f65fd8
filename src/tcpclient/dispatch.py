"""
Background execution for asynchronous sends and receives.

A SerialExecutor runs submitted jobs one at a time, in submission order, on a single daemon thread.
Each job's outcome is delivered through a FutureValue.
"""
import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future
from queue import Empty, Queue

logger = logging.getLogger(__name__)


class FutureValue(Future):
    """ describes a value that may have not yet been computed. Callers can check if the value has arrived, or chose to
        wait until the value has arrived.
        If an exception is encountered computing the value, it is set."""

    def value(self, timeout=None):
        """ blocks until the value is available, raising any exception encountered computing it. """
        return self.result(timeout)


class AsyncLoop:
    """ Continually runs a given function on a background thread.
        Exceptions are logged and posted to a given handler
        The background thread is registered as a daemon.
    """

    def __init__(self, fn: Callable = None, args=(), name=None, log=logger):
        """
        :param fn the function to run
        :param args arguments to pass to fn
        :param name the name given to the background thread
        """
        self.fn = fn
        self.args = args
        self.name = name
        self.stop_event = threading.Event()
        self.background_thread = None
        self.logger = log
        self._start_lock = threading.Lock()

    def start(self):
        """ Starts the background thread if it is not already running. """
        with self._start_lock:
            if self.background_thread is None:
                t = threading.Thread(target=self._run, name=self.name, daemon=True)
                self.background_thread = t
                t.start()

    def exception_handler(self, e):
        self.logger.exception(e)

    def _run(self):
        """ The processing loop for the background thread.
             Invokes the callable for as long as the stop signal is not received.
        """
        self._do(self.startup)
        while self.running():
            self._do(self.loop)
        self._do(self.shutdown)
        self.logger.debug("background thread %s exiting" % self.name)

    def _do(self, callme):
        """ runs a function and captures any exceptions """
        try:
            callme()
        except Exception as e:
            self.exception_handler(e)

    def startup(self):
        """ template method called when the thread starts"""
        pass

    def loop(self):
        self.fn(*self.args)

    def shutdown(self):
        """ template method called when the thread exits """
        pass

    def running(self):
        return not self.stop_event.is_set()

    def stop(self):
        self.stop_event.set()
        thread = self.background_thread
        self.background_thread = None
        if thread and thread is not threading.current_thread():
            thread.join()


class ExecutorShutdownError(RuntimeError):
    """ A job was submitted to an executor that has been shut down. """


class SerialExecutor(AsyncLoop):
    """
    Runs submitted jobs strictly in submission order on one background thread. No two jobs run concurrently.
    Jobs cannot be withdrawn once submitted. The worker thread is started on the first submission.

    :param name the name of the worker thread
    :param poll_interval how often (seconds) an idle worker checks for shutdown
    """

    def __init__(self, name=None, poll_interval=0.1, log=logger):
        super().__init__(name=name, log=log)
        self.poll_interval = poll_interval
        self._jobs = Queue()
        self._shutdown = False
        self._submit_lock = threading.Lock()

    def submit(self, fn: Callable, *args, **kwargs) -> FutureValue:
        """
        Queues fn(*args, **kwargs) to run on the worker thread.
        :return: a FutureValue that receives the return value or the exception raised by fn.
        :raises ExecutorShutdownError: once shutdown_worker() has been called
        """
        future = FutureValue()
        with self._submit_lock:
            if self._shutdown:
                raise ExecutorShutdownError("executor %s has been shut down" % self.name)
            self._jobs.put((future, fn, args, kwargs))
        self.start()
        return future

    def loop(self):
        try:
            job = self._jobs.get(timeout=self.poll_interval)
        except Empty:
            if self._shutdown:
                self.stop_event.set()
            return
        self._run_job(*job)

    def _run_job(self, future, fn, args, kwargs):
        if not future.set_running_or_notify_cancel():
            return
        try:
            result = fn(*args, **kwargs)
        except Exception as e:
            self.logger.exception("job %s failed on %s" % (fn, self.name))
            future.set_exception(e)
        else:
            future.set_result(result)

    def shutdown_worker(self, wait=True):
        """
        Refuses further jobs and stops the worker once the queued jobs have run.
        :param wait: when True, blocks until the worker thread exits
        """
        with self._submit_lock:
            self._shutdown = True
        thread = self.background_thread
        if thread is None:
            return
        if wait and thread is not threading.current_thread():
            thread.join()
        self.background_thread = None

    @property
    def pending(self):
        """ the approximate number of jobs waiting to run """
        return self._jobs.qsize()
