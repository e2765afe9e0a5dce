# -*- coding: utf-8 -*-
#
# Copyright (c) 2011 Roy Liu
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
#   * Redistributions of source code must retain the above copyright notice,
#     this list of conditions and the following disclaimer.
#   * Redistributions in binary form must reproduce the above copyright notice,
#     this list of conditions and the following disclaimer in the documentation
#     and/or other materials provided with the distribution.
#   * Neither the name of the author nor the names of any contributors may be
#     used to endorse or promote products derived from this software without
#     specific prior written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE
# DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDERS OR CONTRIBUTORS BE LIABLE
# FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL
# DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR
# SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
# CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY,
# OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE
# OF THIS SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.

"""Best-effort identification of the process that is feeding us the diff, for diagnostics only.

The lookup runs in a daemon thread started as early as possible, since the calling process may be gone by the time
the input is exhausted. Its result lands in a write-once cell that nothing in the pipeline ever waits on.
"""

import logging
import threading

import psutil

logger = logging.getLogger(__name__)


class WriteOnceCell(object):
    """A value that can be set at most once and read from any thread.
    """

    def __init__(self):
        """Default constructor.
        """

        self._value = None
        self._lock = threading.Lock()
        self._event = threading.Event()

    def set(self, value):
        """Sets the value unless it has been set already.

        Args:
            value: The value.

        Returns:
            Whether this call set the value.
        """

        with self._lock:

            if self._event.is_set():
                return False

            self._value = value
            self._event.set()

            return True

    def get(self, timeout=0):
        """Gets the value.

        Args:
            timeout: How long to wait, in seconds, for the value to be set.

        Returns:
            The value, or None if it is still unset.
        """

        if self._event.wait(timeout):
            return self._value

        return None

    @property
    def is_set(self):
        return self._event.is_set()


calling_process = WriteOnceCell()


def determine_calling_process(pid=None):
    """Gets the command line of the parent of a process.

    Args:
        pid: The process id; defaults to the current process.

    Returns:
        The parent's command line as a list of arguments, or None if it cannot be determined.
    """

    try:

        for parent in psutil.Process(pid).parents():

            cmdline = parent.cmdline()

            if cmdline:
                return cmdline

    except psutil.Error as e:
        logger.debug("Could not determine the calling process: %s", e)

    return None


def start_determining_calling_process(cell=calling_process):
    """Starts filling the given cell with the calling process's command line in the background.

    Returns:
        The started daemon thread.
    """

    thread = threading.Thread(target=lambda: cell.set(determine_calling_process()),
                              name="calling-process", daemon=True)
    thread.start()

    return thread
