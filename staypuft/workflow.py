# -*- coding: utf-8 -*-
#
# Copyright (C) 2016 Red Hat, Inc
#
# Licensed under the Apache License, Version 2.0 (the "License"); you may
# not use this file except in compliance with the License. You may obtain
# a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations
# under the License.

import abc
import itertools
import logging

from staypuft import host as staypuft_host
from staypuft import progress

LOG = logging.getLogger('staypuft')

BUILD = 'Build'
WAIT_UNTIL_INSTALLED = 'WaitUntilInstalled'
STEPS = (BUILD, WAIT_UNTIL_INSTALLED)


class Executor(object, metaclass=abc.ABCMeta):
    """The workflow engine running the steps of a host deployment."""

    @abc.abstractmethod
    def run(self, step, host_name):
        """Run a step for a host, return once the step is done."""

    @abc.abstractmethod
    def progress(self, step, host_name):
        """The progress of a step, between 0 and 1."""


class HostDeploy(object):
    """Deploy a single host: build it and wait until it is installed."""
    def __init__(self, executor, host):
        self.executor = executor
        self.host = host

    def plan(self):
        return [(step, self.host.name) for step in STEPS]

    def run(self):
        for step, host_name in self.plan():
            LOG.info('%s: %s' % (host_name, step))
            self.executor.run(step, host_name)

    def progress_fractions(self):
        return [self.executor.progress(step, host_name)
                for step, host_name in self.plan()]

    def humanized_output(self):
        return progress.humanized_output(self.progress_fractions(),
                                         self.host.name)


def eligible_roles(bindings, ready):
    """Return the bindings whose hosts may be provisioned now.

    A binding is eligible when every binding with a lower deploy order is
    ready. Bindings sharing a deploy order are eligible together.

    :param bindings: the DeploymentRoleHostgroup of a deployment
    :param ready: the names of the roles already deployed
    """
    pending = [b.deploy_order for b in bindings if b.role.name not in ready]
    if not pending:
        return list(bindings)
    barrier = min(pending)
    return [b for b in bindings if b.deploy_order <= barrier]


def deploy_batches(bindings, hosts):
    """Group the hosts by deploy order.

    :returns: a list of (deploy_order, [host]) sorted by deploy order
    """
    bindings = sorted(bindings, key=lambda b: (b.deploy_order, b.role.name))
    batches = []
    for deploy_order, group in itertools.groupby(
            bindings, key=lambda b: b.deploy_order):
        hostgroups = set(id(b.hostgroup) for b in group)
        batch = [h for h in hosts if id(h.hostgroup) in hostgroups]
        if batch:
            batches.append((deploy_order, batch))
    return batches


class DeploymentDeploy(object):
    """Deploy all the hosts of a deployment, one deploy order at a time.

    The deploy lock of the deployment is held during the whole run.
    """
    def __init__(self, executor, deployment, hosts):
        self.executor = executor
        self.deployment = deployment
        self.hosts = staypuft_host.in_deployment(hosts, deployment)
        self.host_deploys = [HostDeploy(executor, h) for h in self.hosts]

    def run(self):
        deploys = dict((id(d.host), d) for d in self.host_deploys)
        with self.deployment.lock('deploy'):
            for deploy_order, batch in deploy_batches(
                    self.deployment.role_hostgroups, self.hosts):
                LOG.info('%s: deploying %d host(s) of order %d' % (
                    self.deployment.name, len(batch), deploy_order))
                for h in batch:
                    deploys[id(h)].run()

    def progress(self, rounding=progress.ROUND_DOWN):
        fractions = []
        for host_deploy in self.host_deploys:
            fractions.extend(host_deploy.progress_fractions())
        return progress.aggregate(fractions, rounding)
