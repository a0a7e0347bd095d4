from aws_cdk import (
    CfnOutput,
    Duration,
    Fn,
    Stack,
    aws_apigateway as apigw,
    aws_cloudfront as cloudfront,
    aws_cloudfront_origins as origins,
    aws_lambda as lambda_,
    aws_s3 as s3,
    aws_s3_deployment as s3deploy,
)
from constructs import Construct

from ..config import StackConfig
from ..edge.routing import (
    HOST_SEGMENT_INDEX,
    AllowedMethods,
    OriginKind,
    RouteRule,
    RouteTable,
    ViewerProtocolPolicy,
    default_route_table,
)
from .fallback import render_fallback_handler

_CACHE_POLICIES = {
    "CachingOptimized": cloudfront.CachePolicy.CACHING_OPTIMIZED,
    "CachingDisabled": cloudfront.CachePolicy.CACHING_DISABLED,
}

_ORIGIN_REQUEST_POLICIES = {
    "AllViewerExceptHostHeader": cloudfront.OriginRequestPolicy.ALL_VIEWER_EXCEPT_HOST_HEADER,
}

_VIEWER_PROTOCOL = {
    ViewerProtocolPolicy.REDIRECT_TO_HTTPS: cloudfront.ViewerProtocolPolicy.REDIRECT_TO_HTTPS,
    ViewerProtocolPolicy.HTTPS_ONLY: cloudfront.ViewerProtocolPolicy.HTTPS_ONLY,
    ViewerProtocolPolicy.ALLOW_ALL: cloudfront.ViewerProtocolPolicy.ALLOW_ALL,
}

_ALLOWED_METHODS = {
    AllowedMethods.GET_HEAD: cloudfront.AllowedMethods.ALLOW_GET_HEAD,
    AllowedMethods.GET_HEAD_OPTIONS: cloudfront.AllowedMethods.ALLOW_GET_HEAD_OPTIONS,
    AllowedMethods.ALL: cloudfront.AllowedMethods.ALLOW_ALL,
}


def behavior_options(
    rule: RouteRule,
    origin: cloudfront.IOrigin,
    edge_lambdas: list[cloudfront.EdgeLambda] | None = None,
) -> cloudfront.BehaviorOptions:
    return cloudfront.BehaviorOptions(
        origin=origin,
        cache_policy=_CACHE_POLICIES[rule.cache_policy.name],
        origin_request_policy=_ORIGIN_REQUEST_POLICIES.get(rule.origin_request_policy.name),
        allowed_methods=_ALLOWED_METHODS[rule.allowed_methods],
        viewer_protocol_policy=_VIEWER_PROTOCOL[rule.viewer_protocol_policy],
        edge_lambdas=edge_lambdas,
    )


class WebApiStack(Stack):
    """SPA bucket + API function behind one CloudFront distribution."""

    def __init__(self, scope: Construct, construct_id: str, *, settings: StackConfig, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)
        self.settings = settings
        self.route_table: RouteTable = default_route_table(
            api_prefix=settings.api_prefix, entry_document=settings.entry_document
        )

        self.api_function = lambda_.Function(
            self,
            "ApiLambda",
            runtime=lambda_.Runtime.PYTHON_3_12,
            handler="api.index.handler",
            code=lambda_.Code.from_asset(settings.api_bundle_dir),
            memory_size=settings.memory_mb,
            timeout=Duration.seconds(settings.timeout_seconds),
            environment=settings.function_environment(),
        )

        self.api = apigw.LambdaRestApi(
            self,
            "ApiGateway",
            handler=self.api_function,
            proxy=True,
            deploy_options=apigw.StageOptions(stage_name=settings.stage),
        )
        # e.g. abc.execute-api.us-east-1.amazonaws.com
        api_domain = Fn.select(HOST_SEGMENT_INDEX, Fn.split("/", self.api.url))

        self.site_bucket = s3.Bucket(
            self,
            "SiteBucket",
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            encryption=s3.BucketEncryption.S3_MANAGED,
            versioned=True,
        )
        oai = cloudfront.OriginAccessIdentity(self, "SiteOAI")
        self.site_bucket.grant_read(oai)

        origins_by_kind = {
            OriginKind.STATIC: origins.S3BucketOrigin.with_origin_access_identity(
                self.site_bucket, origin_access_identity=oai
            ),
            OriginKind.DYNAMIC: origins.HttpOrigin(
                api_domain,
                protocol_policy=cloudfront.OriginProtocolPolicy.HTTPS_ONLY,
                origin_path=f"/{settings.stage}",
            ),
        }

        table = self.route_table
        # Lambda@Edge lives in us-east-1; EdgeFunction adds a support stack when needed.
        self.fallback_function = cloudfront.experimental.EdgeFunction(
            self,
            "SpaFallback",
            runtime=lambda_.Runtime.PYTHON_3_12,
            handler="index.handler",
            code=lambda_.Code.from_inline(render_fallback_handler(table.fallbacks)),
            memory_size=128,
            timeout=Duration.seconds(5),
        )
        static_edge_lambdas = [
            cloudfront.EdgeLambda(
                function_version=self.fallback_function.current_version,
                event_type=cloudfront.LambdaEdgeEventType.ORIGIN_RESPONSE,
            )
        ]

        def edge_lambdas_for(rule: RouteRule) -> list[cloudfront.EdgeLambda] | None:
            return static_edge_lambdas if rule.origin is OriginKind.STATIC and table.fallbacks else None

        self.distribution = cloudfront.Distribution(
            self,
            "Distribution",
            default_root_object=table.default_root_object,
            default_behavior=behavior_options(
                table.default, origins_by_kind[table.default.origin], edge_lambdas_for(table.default)
            ),
            additional_behaviors={
                rule.path_pattern: behavior_options(rule, origins_by_kind[rule.origin], edge_lambdas_for(rule))
                for rule in table.behaviors
            },
        )

        s3deploy.BucketDeployment(
            self,
            "DeployWeb",
            sources=[s3deploy.Source.asset(settings.web_dist_dir)],
            destination_bucket=self.site_bucket,
            distribution=self.distribution,
            distribution_paths=["/*"],
        )

        CfnOutput(self, "CloudFrontURL", value=f"https://{self.distribution.domain_name}")
        CfnOutput(self, "ApiURL", value=self.api.url)
