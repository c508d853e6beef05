#  Licensed to the Apache Software Foundation (ASF) under one
#  or more contributor license agreements.  See the NOTICE file
#  distributed with this work for additional information
#  regarding copyright ownership.  The ASF licenses this file
#  to you under the Apache License, Version 2.0 (the
#  "License"); you may not use this file except in compliance
#  with the License.  You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing,
#  software distributed under the License is distributed on an
#  "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY
#  KIND, either express or implied.  See the License for the
#  specific language governing permissions and limitations
#  under the License.

"""
GeoBench Exceptions

Only infrastructure failures abort a run. Everything else (a failing query,
a container that is not running) is recorded or skipped where it happens.
"""


class GeoBenchError(Exception):
    """Base class for all GeoBench errors."""


class InfrastructureError(GeoBenchError):
    """A failure that makes the current run meaningless and aborts it."""


class TargetUnavailableError(InfrastructureError):
    """A benchmark target could not be reached at all."""


class ResultsStoreError(InfrastructureError):
    """The results store could not be read or written."""


class SuiteSetupError(InfrastructureError):
    """A suite's setup hook failed, so none of its cases can run."""


class DuplicateRunError(ResultsStoreError):
    """A run with the same identifier has already been recorded."""


class ResourceUnavailableError(GeoBenchError):
    """A monitored resource could not be sampled on this tick."""


class WorkloadError(GeoBenchError):
    """Every operation dispatched by a workload failed."""
