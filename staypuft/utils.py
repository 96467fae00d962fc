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

import importlib.resources
import os.path

import yaml

import staypuft


def pkg_data_filename(resource_name, filename=None):
    """Returns the path of a file installed along the package
    """
    resource_filename = str(
        importlib.resources.files(staypuft.__name__).joinpath(resource_name))
    if filename is not None:
        resource_filename = os.path.join(resource_filename, filename)
    return resource_filename


def load_yaml(path):
    """Load a YAML document.

    A path that does not exist is looked up in the package data directory.
    """
    if not os.path.exists(path):
        path = pkg_data_filename('data', path)
    with open(path) as fd:
        return yaml.safe_load(fd)
