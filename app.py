#!/usr/bin/env python3
import logging
import os

import aws_cdk as cdk

from api_gen.api_gen_stack import ApiGenStack
from api_gen.config import Settings, load_input_data

app = cdk.App()

settings = Settings.from_environment(try_get_context=app.node.try_get_context)

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

input_data = load_input_data(settings.input_path)

env = cdk.Environment(
    account=settings.account,
    region=settings.region,
)

stack = ApiGenStack(
    app,
    "ApiGenStack",
    input_data=input_data,
    base_dir=settings.base_dir or os.path.dirname(os.path.abspath(__file__)),
    verify_tables=settings.verify_tables,
    env=env,
)
stack.do_deployment()

app.synth()
