import logging
import os
from pathlib import Path

from aws_cdk import (
    CfnOutput,
    Duration,
    Environment,
    Stack,
    aws_apigateway as apigw,
    aws_certificatemanager as acm,
    aws_dynamodb as dynamodb,
    aws_iam as iam,
    aws_lambda as lambda_,
)
from constructs import Construct

from api_gen.binder import bind_config, resolve_stack_config
from api_gen.descriptor import parse_input_data
from api_gen.dispatch import dispatch_endpoints
from api_gen.naming import ResourceConstant, generate_resource_name
from api_gen.tables import verify_tables_exist

logger = logging.getLogger(__name__)

# construct id suffix per table lookup
TABLE_CONSTRUCT_IDS = {
    ResourceConstant.PRODUCTS: "productsTableName",
    ResourceConstant.USERS: "usersTableName",
    ResourceConstant.USERS_POLICY: "usersPolicyTableName",
    ResourceConstant.GLOBAL_COUNTER: "globalCounterTableName",
    ResourceConstant.USER_POOL: "userPool",
}


def _asset_and_handler(unit_path: Path):
    # a directory is the asset itself; anything else names the module in its parent
    if unit_path.is_dir():
        return unit_path, "index.handler"
    return unit_path.parent, f"{unit_path.stem}.handler"


def _cors_options(cors):
    if not cors:
        return None
    if cors is True:
        return apigw.CorsOptions(
            allow_origins=apigw.Cors.ALL_ORIGINS,
            allow_methods=apigw.Cors.ALL_METHODS,
        )
    return apigw.CorsOptions(
        allow_origins=cors.get("allowOrigins") or apigw.Cors.ALL_ORIGINS,
        allow_methods=cors.get("allowMethods") or apigw.Cors.ALL_METHODS,
        allow_headers=cors.get("allowHeaders") or apigw.Cors.DEFAULT_HEADERS,
        allow_credentials=cors.get("allowCredentials"),
    )


class ApiGenStack(Stack):
    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        input_data,
        base_dir=None,
        naming=generate_resource_name,
        verify_tables=False,
        table_client=None,
        **kwargs,
    ):
        kwargs.setdefault(
            "env",
            Environment(
                region=os.getenv("CDK_DEFAULT_REGION"),
                account=os.getenv("CDK_DEFAULT_ACCOUNT"),
            ),
        )
        super().__init__(scope, construct_id, **kwargs)

        self.naming = naming
        self.verify_tables = verify_tables
        self.table_client = table_client

        # fails before any construct exists
        descriptor = parse_input_data(input_data)
        self.config = resolve_stack_config(
            descriptor,
            base_dir or os.getcwd(),
            region=kwargs["env"].region,
            account=kwargs["env"].account,
        )

    def do_deployment(self):
        binding = bind_config(self.config, self.naming)
        config = binding.config

        if self.verify_tables:
            verify_tables_exist(binding.tables, client=self.table_client, region=config.region)

        tables = {
            constant: dynamodb.Table.from_table_name(
                self, f"{config.stage}-{TABLE_CONSTRUCT_IDS[constant]}", table_name
            )
            for constant, table_name in binding.tables.names.items()
        }

        rest_api = self._create_api_gateway()

        authorizer = None
        if binding.authorizer is not None:
            auth_fn = self._create_authorizer_lambda(binding.authorizer, tables)
            # an unattached TokenAuthorizer fails validation at synth
            if any(e.authorized for e in binding.endpoints):
                authorizer = apigw.TokenAuthorizer(self, "ApiAuthorizer", handler=auth_fn)

        lambda_role = iam.Role(
            self,
            "LambdaRole-SystemManagerGetAccess",
            assumed_by=iam.ServicePrincipal("lambda.amazonaws.com"),
        )
        lambda_role.add_to_policy(
            iam.PolicyStatement(
                resources=list(binding.grants.lambda_role.resources),
                actions=list(binding.grants.lambda_role.actions),
            )
        )

        def provision(endpoint_binding):
            return self._create_endpoint_lambda(
                endpoint_binding,
                tables,
                lambda_role,
                rest_api,
                authorizer if endpoint_binding.authorized else None,
            )

        # construct calls go through a single jsii kernel, so one worker
        self.endpoint_functions = dispatch_endpoints(binding.endpoints, provision, max_workers=1)

        CfnOutput(self, "ApiUrl", value=rest_api.url)
        if config.mapping_domain:
            CfnOutput(self, "MappingDomain", value=config.mapping_domain)

        logger.info(
            "synthesized %s with %d endpoint(s)", config.gateway_name, len(self.endpoint_functions)
        )
        self.binding = binding
        self.rest_api = rest_api
        return binding

    def _create_api_gateway(self):
        config = self.config
        rest_api = apigw.RestApi(
            self,
            "RestApi",
            rest_api_name=f"{config.gateway_name or config.product_short_name}-{config.stage}",
            deploy_options=apigw.StageOptions(stage_name=config.stage),
            default_cors_preflight_options=_cors_options(config.cors_config),
        )

        if config.mapping_domain and config.certificate_arn:
            rest_api.add_domain_name(
                "CustomDomain",
                domain_name=config.mapping_domain,
                certificate=acm.Certificate.from_certificate_arn(
                    self, "DomainCertificate", config.certificate_arn
                ),
            )
        return rest_api

    def _create_authorizer_lambda(self, authorizer_binding, tables):
        asset_dir, handler = _asset_and_handler(authorizer_binding.unit_path)

        auth_fn = lambda_.Function(
            self,
            "AuthorizerLambda",
            runtime=lambda_.Runtime.PYTHON_3_12,
            handler=handler,
            code=lambda_.Code.from_asset(str(asset_dir)),
            timeout=Duration.seconds(5),
            memory_size=128,
            environment=dict(authorizer_binding.environment),
        )

        for grant in authorizer_binding.grants:
            self._grant(tables[grant.resource], auth_fn)

        self.authorizer_function = auth_fn
        return auth_fn

    def _create_endpoint_lambda(self, endpoint_binding, tables, lambda_role, rest_api, authorizer):
        endpoint = endpoint_binding.endpoint
        asset_dir, handler = _asset_and_handler(endpoint_binding.compute_unit)

        fn = lambda_.Function(
            self,
            f"{endpoint.service_method_name}Lambda",
            runtime=lambda_.Runtime.PYTHON_3_12,
            handler=handler,
            code=lambda_.Code.from_asset(str(asset_dir)),
            timeout=Duration.seconds(10),
            role=lambda_role,
            environment=dict(endpoint_binding.environment),
        )

        for grant in endpoint_binding.grants:
            self._grant(tables[grant.resource], fn)

        resource = rest_api.root.resource_for_path(endpoint.route_path)
        resource.add_method(
            endpoint.method,
            apigw.LambdaIntegration(fn),
            authorizer=authorizer,
        )
        return fn

    @staticmethod
    def _grant(table, grantee):
        table.grant_read_write_data(grantee)
