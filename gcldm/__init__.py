# -*- coding: utf-8 -*-
"""
@module: gcldm
"""
from .network_model import create_network_model
from .network_model import NetworkModel
from .model_spec import ModelSpec
from .model_spec import create_model_spec
from .simulation import simulate_network

__version__ = "0.1.0"
