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

import copy

import yaml

from staypuft.exceptions import ConfigError

DEFAULTS = {
    'catalog': 'catalog.yaml',
    'functional_dependencies': 'functional_dependencies.yaml',
    'params': 'params.yaml',
    'puppetclasses': 'puppetclasses.yaml',
    'passwords': {},
    'progress': {},
}

# the keys each step needs
REQUIRED = {
    'seed': (),
    'layout': ('deployment',),
    'params': ('deployment',),
    'progress': ('progress',),
    'destroy': ('deployment',),
}


def load_config(config_file, step=None):
    """Read the YAML configuration file of the staypuft command.

    Example::

        state_file: /var/lib/staypuft/state.yaml
        deployment:
          name: production
          networking: neutron
          layout_name: High Availability Controllers / Compute
        passwords:
          mode: single
          single_password: secrete
        progress:
          host1.example.com: [0.5, 1.0]
    """
    config = yaml.safe_load(config_file) or {}
    if not isinstance(config, dict):
        raise ConfigError('the configuration must be a mapping')
    for key, value in DEFAULTS.items():
        config.setdefault(key, copy.deepcopy(value))
    for key in REQUIRED.get(step, ()):
        if not config.get(key):
            raise ConfigError('%s: missing %s section' % (step, key))
    deployment = config.get('deployment')
    if deployment is not None and not deployment.get('name'):
        raise ConfigError('deployment: missing name')
    return config
