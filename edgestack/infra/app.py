import os

import aws_cdk as cdk

from ..config import StackConfig
from .stack import WebApiStack


def build_app(settings: StackConfig | None = None) -> cdk.App:
	settings = settings or StackConfig()
	app = cdk.App()
	env = cdk.Environment(
		account=os.getenv("CDK_DEFAULT_ACCOUNT"),
		region=os.getenv("CDK_DEFAULT_REGION", "us-east-1"),
	)
	WebApiStack(app, settings.stack_name, settings=settings, env=env)
	return app


def main() -> None:
	build_app().synth()


if __name__ == "__main__":
	main()
