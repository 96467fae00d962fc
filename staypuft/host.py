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

"""Relation between the hosts and the OpenStack deployments.

A host belongs to a deployment when its hostgroup is one of the role
hostgroups of the deployment.
"""

DISCOVERY_ENVIRONMENT = 'discovery'


def in_deployment(hosts, deployment):
    hostgroups = set(id(b.hostgroup) for b in deployment.role_hostgroups)
    return [host for host in hosts if id(host.hostgroup) in hostgroups]


def in_roles(hosts, deployment, *role_names):
    hostgroups = set(id(b.hostgroup) for b in deployment.role_hostgroups
                     if b.role.name in role_names)
    return [host for host in hosts if id(host.hostgroup) in hostgroups]


def in_role(hosts, deployment, role_name):
    return in_roles(hosts, deployment, role_name)


def open_stack_assigned(host, base_hostgroup):
    """True if the host sits in a role hostgroup of a deployment."""
    hostgroup = host.hostgroup
    if hostgroup is None or hostgroup.parent is None:
        return False
    return hostgroup.parent.parent is base_hostgroup


def open_stack_environment_set(host, base_hostgroup):
    return (open_stack_assigned(host, base_hostgroup) and
            host.environment is not None and
            host.environment != DISCOVERY_ENVIRONMENT)


def open_stack_deployed(host, deployment):
    if deployment is None or deployment.in_progress():
        return False
    base_hostgroup = deployment.store.base_hostgroup
    return (open_stack_environment_set(host, base_hostgroup) and
            open_stack_assigned(host, base_hostgroup))


def open_stack_unassign(host):
    host.hostgroup = None
