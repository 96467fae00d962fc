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

import secrets

MODE_SINGLE = 'single'
MODE_RANDOM = 'random'

PASSWORD_NAMES = (
    'admin', 'ceilometer_user', 'cinder_db', 'cinder_user', 'glance_db',
    'glance_user', 'heat_db', 'heat_user', 'heat_cfn_user', 'keystone_db',
    'keystone_user', 'mysql_root', 'neutron_db', 'neutron_user', 'nova_db',
    'nova_user', 'swift_admin', 'swift_user', 'amqp', 'amqp_nssdb',
    'keystone_admin_token')

# never shared with the user supplied password
SECRET_NAMES = (
    'ceilometer_metering_secret', 'heat_auth_encrypt_key',
    'horizon_secret_key', 'swift_shared_secret',
    'neutron_metadata_proxy_secret')


def generate():
    return secrets.token_hex(16)


class Passwords(object):
    """The passwords and secrets of a deployment.

    In single mode, every password resolves to the same user supplied value.
    In random mode, each service gets its own. Secrets are always specific.
    """
    jail_allow = ('effective_value', 'secret', 'mode')

    def __init__(self, mode=MODE_RANDOM, single_password=None, values=None,
                 secret_values=None):
        if mode not in (MODE_SINGLE, MODE_RANDOM):
            raise ValueError('unknown password mode: %s' % mode)
        if mode == MODE_SINGLE and not single_password:
            raise ValueError('single password mode requires a password')
        self.mode = mode
        self.single_password = single_password
        values = values or {}
        secret_values = secret_values or {}
        self._values = dict(
            (name, values.get(name) or generate()) for name in PASSWORD_NAMES)
        self._secrets = dict(
            (name, secret_values.get(name) or generate())
            for name in SECRET_NAMES)

    def effective_value(self, name):
        """The password to configure for name, in the current mode."""
        if name not in self._values:
            raise KeyError('unknown password: %s' % name)
        if self.mode == MODE_SINGLE:
            return self.single_password
        return self._values[name]

    def secret(self, name):
        return self._secrets[name]
