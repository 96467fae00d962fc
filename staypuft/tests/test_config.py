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

import io

import pytest

from staypuft.config import load_config
from staypuft.exceptions import ConfigError


def test_defaults():
    config = load_config(io.StringIO(u''))
    assert config['catalog'] == 'catalog.yaml'
    assert config['passwords'] == {}
    config['passwords']['mode'] = 'single'
    assert load_config(io.StringIO(u''))['passwords'] == {}


def test_load():
    config = load_config(io.StringIO(u'''
catalog: /etc/staypuft/catalog.yaml
deployment:
  name: production
  networking: neutron
'''), 'layout')
    assert config['catalog'] == '/etc/staypuft/catalog.yaml'
    assert config['deployment']['networking'] == 'neutron'
    assert config['params'] == 'params.yaml'


@pytest.mark.parametrize('content,step', [
    (u'- a\n- b\n', None),
    (u'catalog: c.yaml\n', 'layout'),
    (u'deployment: {name: d}\n', 'progress'),
    (u'deployment: {networking: nova}\n', 'layout'),
    (u'deployment: {networking: nova}\n', None),
])
def test_invalid(content, step):
    with pytest.raises(ConfigError):
        load_config(io.StringIO(content), step)
