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

import logging
import socket

from jinja2 import StrictUndefined
from jinja2.sandbox import SandboxedEnvironment

from staypuft.utils import load_yaml

LOG = logging.getLogger('staypuft')

KEY_TYPES = ('string', 'boolean', 'integer', 'real', 'array', 'hash',
             'yaml', 'json')


def get_key_type(value):
    """Guess the smart class parameter type of a default value."""
    # bool is a subclass of int
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, list):
        return 'array'
    if isinstance(value, dict):
        return 'hash'
    if isinstance(value, int):
        return 'integer'
    if isinstance(value, float):
        return 'real'


def load_default_params(path='params.yaml'):
    """Load the default parameter values used when seeding the catalog."""
    params = load_yaml(path) or {}
    if params.get('admin_email') is None:
        domain = socket.getfqdn().partition('.')[2] or 'localdomain'
        params['admin_email'] = 'admin@%s' % domain
    return params


def apply_default_params(puppetclass, params):
    """Set the seed defaults on the parameters of a class.

    Every parameter of the class is marked as overridable, even the ones
    without a default in params.
    """
    for param in puppetclass.class_params.values():
        if param.key in params:
            param.key_type = get_key_type(params[param.key])
            param.default_value = params[param.key]
        param.override = True


def is_template(value):
    return isinstance(value, str) and '{{' in value


class DeploymentJail(SandboxedEnvironment):
    """A Jinja2 sandbox for the parameters that depend on a deployment.

    Only the attributes a class lists in its jail_allow tuple can be
    reached from a template, the others raise a SecurityError.
    """
    def __init__(self, **kwargs):
        kwargs.setdefault('undefined', StrictUndefined)
        SandboxedEnvironment.__init__(self, **kwargs)

    def is_safe_attribute(self, obj, attr, value):
        if not SandboxedEnvironment.is_safe_attribute(self, obj, attr, value):
            return False
        return attr in getattr(type(obj), 'jail_allow', ())

    def render(self, value, deployment):
        if not is_template(value):
            return value
        return self.from_string(value).render(deployment=deployment)


def render_class_parameters(deployment, puppetclass, jail=None):
    """Return the {key: value} defaults of a class for a deployment."""
    jail = jail or DeploymentJail()
    values = {}
    for key in sorted(puppetclass.class_params):
        param = puppetclass.class_params[key]
        if param.default_value is None:
            continue
        values[key] = jail.render(param.default_value, deployment)
    return values


def render_hostgroup_parameters(deployment, hostgroup, classes, jail=None):
    """Return {class name: {key: value}} for the classes of a hostgroup."""
    jail = jail or DeploymentJail()
    rendered = {}
    for puppetclass in classes.resolve(hostgroup.puppetclasses):
        rendered[puppetclass.name] = render_class_parameters(
            deployment, puppetclass, jail)
    return rendered
