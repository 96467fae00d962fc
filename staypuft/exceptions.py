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


class StaypuftError(Exception):
    """Base class for the errors raised by staypuft."""


class DuplicateRoleError(StaypuftError):
    """A layout references the same role more than once."""
    def __init__(self, role_name):
        self.role_name = role_name
        StaypuftError.__init__(
            self, 'role %s is listed more than once' % role_name)


class NoProgressDataError(StaypuftError):
    """No workflow step reported any progress."""


class CatalogError(StaypuftError):
    """The catalog definition references something that does not exist."""


class InvalidSettingError(StaypuftError):
    def __init__(self, name, value, allowed):
        self.name = name
        self.value = value
        self.allowed = allowed
        StaypuftError.__init__(
            self, '%s: %r is not one of %s' % (name, value, ', '.join(allowed)))


class LockedError(StaypuftError):
    """The deployment is already locked by another operation."""


class ConfigError(StaypuftError):
    pass


class UnresolvedClassWarning(UserWarning):
    """A provisioning class is missing from the catalog and was skipped."""
