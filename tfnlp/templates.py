"""Built-in Terraform configuration templates.

The templates are described as nested blocks and rendered to HCL text with
the attribute alignment that ``terraform fmt`` produces.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class _Attr:
    """An attribute; a value spanning several lines keeps its own layout."""

    name: str
    expr: str


@dataclass(frozen=True)
class _Map:
    """An attribute whose value is an object literal."""

    name: str
    entries: tuple[tuple[str, str], ...]


@dataclass(frozen=True)
class _Block:
    kind: str
    labels: tuple[str, ...]
    body: tuple["_Item", ...]


@dataclass(frozen=True)
class _Comment:
    text: str


_Item = Optional[Union[_Attr, _Map, _Block, _Comment]]


def _render_body(items: tuple[_Item, ...] | list[_Item], depth: int) -> list[str]:
    pad = "  " * depth
    lines: list[str] = []
    run: list[tuple[str, str]] = []

    def flush() -> None:
        if run:
            width = max(len(name) for name, _ in run)
            lines.extend(f"{pad}{name.ljust(width)} = {value}" for name, value in run)
            run.clear()

    for item in items:
        if isinstance(item, _Attr) and "\n" not in item.expr:
            run.append((item.name, item.expr))
            continue
        flush()
        if item is None:
            lines.append("")
        elif isinstance(item, _Comment):
            lines.append(f"{pad}# {item.text}")
        elif isinstance(item, _Attr):
            first, *rest = item.expr.split("\n")
            lines.append(f"{pad}{item.name} = {first}")
            lines.extend(f"{pad}{line}" for line in rest)
        elif isinstance(item, _Map):
            lines.append(f"{pad}{item.name} = {{")
            entries = [_Attr(key, value) for key, value in item.entries]
            lines.extend(_render_body(entries, depth + 1))
            lines.append(f"{pad}}}")
        else:
            header = " ".join([item.kind, *(f'"{label}"' for label in item.labels)])
            lines.append(f"{pad}{header} {{")
            lines.extend(_render_body(item.body, depth + 1))
            lines.append(f"{pad}}}")
    flush()
    return lines


def _document(*items: _Item) -> str:
    body: list[_Item] = []
    for item in items:
        if body and not isinstance(body[-1], _Comment):
            body.append(None)
        body.append(item)
    return "\n".join(_render_body(body, 0)) + "\n"


def _q(text: str) -> str:
    return f'"{text}"'


def _env(suffix: str) -> str:
    return _q("${var.environment}" + suffix)


def _list(*items: str) -> str:
    return "[" + ", ".join(items) + "]"


def _block(kind: str, *body: _Item) -> _Block:
    return _Block(kind, (), body)


def _resource(kind: str, name: str, *body: _Item) -> _Block:
    return _Block("resource", (kind, name), body)


def _data(kind: str, name: str, *body: _Item) -> _Block:
    return _Block("data", (kind, name), body)


def _output(name: str, *body: _Item) -> _Block:
    return _Block("output", (name,), body)


def _variable(name: str, description: str, default: str | None = None) -> _Block:
    body: list[_Item] = [_Attr("description", _q(description)), _Attr("type", "string")]
    if default is not None:
        body.append(_Attr("default", _q(default)))
    return _Block("variable", (name,), tuple(body))


def _terraform(provider: str, source: str, version: str) -> _Block:
    return _block(
        "terraform",
        _Attr("required_version", _q(">= 1.0")),
        _block(
            "required_providers",
            _Map(provider, (("source", _q(source)), ("version", _q(version)))),
        ),
    )


def _tags(name_suffix: str, *extra: tuple[str, str]) -> _Map:
    return _Map(
        "tags",
        (("Name", _env(name_suffix)), ("Environment", "var.environment"), *extra),
    )


def _rule(kind: str, port: int, protocol: str, source: _Attr) -> _Block:
    return _block(
        kind,
        _Attr("from_port", str(port)),
        _Attr("to_port", str(port)),
        _Attr("protocol", _q(protocol)),
        source,
    )


_VPC_ID = _Attr("vpc_id", "aws_vpc.main.id")
_COUNT = _Attr("count", "2")
_ZONE = _Attr("availability_zone", "data.aws_availability_zones.available.names[count.index]")
_ANYWHERE = _Attr("cidr_blocks", _list(_q("0.0.0.0/0")))
_AWS_PROVIDER = _Block("provider", ("aws",), (_Attr("region", "var.aws_region"),))
_AWS_TERRAFORM = _terraform("aws", "hashicorp/aws", "~> 5.0")
_AWS_REGION = _variable("aws_region", "AWS region", "us-west-2")
_ENVIRONMENT = _variable("environment", "Environment name", "dev")
_INDEXED = "-${count.index + 1}"
_PUBLIC_SUBNETS = _list("aws_subnet.public[0].id", "aws_subnet.public[1].id")


def _aws_vpc() -> str:
    return _document(
        _Comment("AWS VPC Configuration"),
        _AWS_TERRAFORM,
        _AWS_PROVIDER,
        _AWS_REGION,
        _variable("vpc_cidr", "CIDR block for VPC", "10.0.0.0/16"),
        _ENVIRONMENT,
        _Comment("VPC"),
        _resource(
            "aws_vpc", "main",
            _Attr("cidr_block", "var.vpc_cidr"),
            _Attr("enable_dns_hostnames", "true"),
            _Attr("enable_dns_support", "true"),
            None,
            _tags("-vpc"),
        ),
        _Comment("Internet Gateway"),
        _resource("aws_internet_gateway", "main", _VPC_ID, None, _tags("-igw")),
        _Comment("Public Subnets"),
        _resource(
            "aws_subnet", "public",
            _COUNT,
            _VPC_ID,
            _Attr("cidr_block", _q("10.0.${count.index + 1}.0/24")),
            _ZONE,
            _Attr("map_public_ip_on_launch", "true"),
            None,
            _tags("-public-subnet" + _INDEXED, ("Type", _q("Public"))),
        ),
        _Comment("Private Subnets"),
        _resource(
            "aws_subnet", "private",
            _COUNT,
            _VPC_ID,
            _Attr("cidr_block", _q("10.0.${count.index + 10}.0/24")),
            _ZONE,
            None,
            _tags("-private-subnet" + _INDEXED, ("Type", _q("Private"))),
        ),
        _Comment("NAT Gateway"),
        _resource(
            "aws_eip", "nat",
            _COUNT,
            _Attr("domain", _q("vpc")),
            None,
            _tags("-nat-eip" + _INDEXED),
        ),
        _resource(
            "aws_nat_gateway", "main",
            _COUNT,
            _Attr("allocation_id", "aws_eip.nat[count.index].id"),
            _Attr("subnet_id", "aws_subnet.public[count.index].id"),
            None,
            _tags("-nat-gateway" + _INDEXED),
            None,
            _Attr("depends_on", _list("aws_internet_gateway.main")),
        ),
        _Comment("Route Tables"),
        _resource(
            "aws_route_table", "public",
            _VPC_ID,
            None,
            _block(
                "route",
                _Attr("cidr_block", _q("0.0.0.0/0")),
                _Attr("gateway_id", "aws_internet_gateway.main.id"),
            ),
            None,
            _tags("-public-rt"),
        ),
        _resource(
            "aws_route_table", "private",
            _COUNT,
            _VPC_ID,
            None,
            _block(
                "route",
                _Attr("cidr_block", _q("0.0.0.0/0")),
                _Attr("nat_gateway_id", "aws_nat_gateway.main[count.index].id"),
            ),
            None,
            _tags("-private-rt" + _INDEXED),
        ),
        _Comment("Route Table Associations"),
        _resource(
            "aws_route_table_association", "public",
            _COUNT,
            _Attr("subnet_id", "aws_subnet.public[count.index].id"),
            _Attr("route_table_id", "aws_route_table.public.id"),
        ),
        _resource(
            "aws_route_table_association", "private",
            _COUNT,
            _Attr("subnet_id", "aws_subnet.private[count.index].id"),
            _Attr("route_table_id", "aws_route_table.private[count.index].id"),
        ),
        _Comment("Data Sources"),
        _data("aws_availability_zones", "available", _Attr("state", _q("available"))),
        _Comment("Outputs"),
        _output(
            "vpc_id",
            _Attr("description", _q("ID of the VPC")),
            _Attr("value", "aws_vpc.main.id"),
        ),
        _output(
            "public_subnet_ids",
            _Attr("description", _q("IDs of the public subnets")),
            _Attr("value", "aws_subnet.public[*].id"),
        ),
        _output(
            "private_subnet_ids",
            _Attr("description", _q("IDs of the private subnets")),
            _Attr("value", "aws_subnet.private[*].id"),
        ),
    )


_BOOT_SCRIPT = (
    "#!/bin/bash",
    "yum update -y",
    "yum install -y httpd",
    "systemctl start httpd",
    "systemctl enable httpd",
    'echo "<h1>Hello from ${var.environment} environment!</h1>" > /var/www/html/index.html',
)


def _user_data() -> str:
    indent = " " * 12
    body = "".join(f"{indent}{line}\n" for line in _BOOT_SCRIPT)
    return f"base64encode(<<-EOF\n{body}{indent}EOF\n)"


def _aws_web_app() -> str:
    return _document(
        _Comment("AWS Web Application Infrastructure"),
        _AWS_TERRAFORM,
        _AWS_PROVIDER,
        _AWS_REGION,
        _ENVIRONMENT,
        _Comment("VPC (simplified - use VPC module in production)"),
        _resource(
            "aws_vpc", "main",
            _Attr("cidr_block", _q("10.0.0.0/16")),
            _Attr("enable_dns_hostnames", "true"),
            _Attr("enable_dns_support", "true"),
            None,
            _tags("-webapp-vpc"),
        ),
        _Comment("Security Group for ALB"),
        _resource(
            "aws_security_group", "alb",
            _Attr("name", _env("-alb-sg")),
            _Attr("description", _q("Security group for Application Load Balancer")),
            _VPC_ID,
            None,
            _rule("ingress", 80, "tcp", _ANYWHERE),
            None,
            _rule("ingress", 443, "tcp", _ANYWHERE),
            None,
            _rule("egress", 0, "-1", _ANYWHERE),
            None,
            _tags("-alb-sg"),
        ),
        _Comment("Security Group for EC2 instances"),
        _resource(
            "aws_security_group", "web",
            _Attr("name", _env("-web-sg")),
            _Attr("description", _q("Security group for web servers")),
            _VPC_ID,
            None,
            _rule(
                "ingress", 80, "tcp",
                _Attr("security_groups", _list("aws_security_group.alb.id")),
            ),
            None,
            _rule("egress", 0, "-1", _ANYWHERE),
            None,
            _tags("-web-sg"),
        ),
        _Comment("Launch Template"),
        _resource(
            "aws_launch_template", "web",
            _Attr("name_prefix", _env("-web-")),
            _Attr("image_id", "data.aws_ami.amazon_linux.id"),
            _Attr("instance_type", _q("t3.micro")),
            None,
            _Attr("vpc_security_group_ids", _list("aws_security_group.web.id")),
            None,
            _Attr("user_data", _user_data()),
            None,
            _block(
                "tag_specifications",
                _Attr("resource_type", _q("instance")),
                _tags("-web-instance"),
            ),
        ),
        _Comment("Auto Scaling Group"),
        _resource(
            "aws_autoscaling_group", "web",
            _Attr("name", _env("-web-asg")),
            _Attr("vpc_zone_identifier", _PUBLIC_SUBNETS),
            _Attr("target_group_arns", _list("aws_lb_target_group.web.arn")),
            _Attr("health_check_type", _q("ELB")),
            _Attr("min_size", "2"),
            _Attr("max_size", "6"),
            _Attr("desired_capacity", "2"),
            None,
            _block(
                "launch_template",
                _Attr("id", "aws_launch_template.web.id"),
                _Attr("version", _q("$Latest")),
            ),
            None,
            _block(
                "tag",
                _Attr("key", _q("Name")),
                _Attr("value", _env("-web-asg")),
                _Attr("propagate_at_launch", "false"),
            ),
            None,
            _block(
                "tag",
                _Attr("key", _q("Environment")),
                _Attr("value", "var.environment"),
                _Attr("propagate_at_launch", "true"),
            ),
        ),
        _Comment("Application Load Balancer"),
        _resource(
            "aws_lb", "web",
            _Attr("name", _env("-web-alb")),
            _Attr("internal", "false"),
            _Attr("load_balancer_type", _q("application")),
            _Attr("security_groups", _list("aws_security_group.alb.id")),
            _Attr("subnets", _PUBLIC_SUBNETS),
            None,
            _Attr("enable_deletion_protection", "false"),
            None,
            _tags("-web-alb"),
        ),
        _Comment("Target Group"),
        _resource(
            "aws_lb_target_group", "web",
            _Attr("name", _env("-web-tg")),
            _Attr("port", "80"),
            _Attr("protocol", _q("HTTP")),
            _VPC_ID,
            None,
            _block(
                "health_check",
                _Attr("enabled", "true"),
                _Attr("healthy_threshold", "2"),
                _Attr("interval", "30"),
                _Attr("matcher", _q("200")),
                _Attr("path", _q("/")),
                _Attr("port", _q("traffic-port")),
                _Attr("protocol", _q("HTTP")),
                _Attr("timeout", "5"),
                _Attr("unhealthy_threshold", "2"),
            ),
            None,
            _tags("-web-tg"),
        ),
        _Comment("Load Balancer Listener"),
        _resource(
            "aws_lb_listener", "web",
            _Attr("load_balancer_arn", "aws_lb.web.arn"),
            _Attr("port", _q("80")),
            _Attr("protocol", _q("HTTP")),
            None,
            _block(
                "default_action",
                _Attr("type", _q("forward")),
                _Attr("target_group_arn", "aws_lb_target_group.web.arn"),
            ),
        ),
        _Comment("Data Sources"),
        _data(
            "aws_ami", "amazon_linux",
            _Attr("most_recent", "true"),
            _Attr("owners", _list(_q("amazon"))),
            None,
            _block(
                "filter",
                _Attr("name", _q("name")),
                _Attr("values", _list(_q("amzn2-ami-hvm-*-x86_64-gp2"))),
            ),
        ),
        _Comment("Outputs"),
        _output(
            "load_balancer_dns",
            _Attr("description", _q("DNS name of the load balancer")),
            _Attr("value", "aws_lb.web.dns_name"),
        ),
    )


_NODE_ROLES = (
    "roles/logging.logWriter",
    "roles/monitoring.metricWriter",
    "roles/monitoring.viewer",
    "roles/stackdriver.resourceMetadata.writer",
)


def _multiline_list(opening: str, items: tuple[str, ...], closing: str) -> str:
    body = ",\n".join(f"  {_q(item)}" for item in items)
    return f"{opening}\n{body}\n{closing}"


def _gcp_gke() -> str:
    return _document(
        _Comment("GCP GKE Cluster Configuration"),
        _terraform("google", "hashicorp/google", "~> 4.0"),
        _Block(
            "provider", ("google",),
            (_Attr("project", "var.project_id"), _Attr("region", "var.region")),
        ),
        _variable("project_id", "GCP Project ID"),
        _variable("region", "GCP region", "us-central1"),
        _ENVIRONMENT,
        _Comment("GKE Cluster"),
        _resource(
            "google_container_cluster", "primary",
            _Attr("name", _env("-gke-cluster")),
            _Attr("location", "var.region"),
            None,
            _Comment("Only separately managed node pools are used, so the default"),
            _Comment("pool is created as small as possible and removed right away."),
            _Attr("remove_default_node_pool", "true"),
            _Attr("initial_node_count", "1"),
            None,
            _Attr("network", "google_compute_network.vpc.name"),
            _Attr("subnetwork", "google_compute_subnetwork.subnet.name"),
            None,
            _Comment("Enable network policy"),
            _block("network_policy", _Attr("enabled", "true")),
            None,
            _Comment("Enable workload identity"),
            _block(
                "workload_identity_config",
                _Attr("workload_pool", _q("${var.project_id}.svc.id.goog")),
            ),
            None,
            _Comment("Enable binary authorization"),
            _block(
                "binary_authorization",
                _Attr("evaluation_mode", _q("PROJECT_SINGLETON_POLICY_ENFORCE")),
            ),
        ),
        _Comment("Node Pool"),
        _resource(
            "google_container_node_pool", "primary_nodes",
            _Attr("name", _env("-node-pool")),
            _Attr("location", "var.region"),
            _Attr("cluster", "google_container_cluster.primary.name"),
            _Attr("node_count", "3"),
            None,
            _block(
                "node_config",
                _Attr("preemptible", "false"),
                _Attr("machine_type", _q("e2-medium")),
                None,
                _Comment("A dedicated service account with cloud-platform scope; IAM roles grant its permissions."),
                _Attr("service_account", "google_service_account.gke_node.email"),
                _Attr(
                    "oauth_scopes",
                    _multiline_list("[", ("https://www.googleapis.com/auth/cloud-platform",), "]"),
                ),
                None,
                _Map("labels", (("environment", "var.environment"),)),
                None,
                _Attr("tags", _list(_q("gke-node"), _env("-gke"))),
                None,
                _Map("metadata", (("disable-legacy-endpoints", _q("true")),)),
            ),
            None,
            _block(
                "management",
                _Attr("auto_repair", "true"),
                _Attr("auto_upgrade", "true"),
            ),
        ),
        _Comment("VPC"),
        _resource(
            "google_compute_network", "vpc",
            _Attr("name", _env("-vpc")),
            _Attr("auto_create_subnetworks", "false"),
        ),
        _Comment("Subnet"),
        _resource(
            "google_compute_subnetwork", "subnet",
            _Attr("name", _env("-subnet")),
            _Attr("ip_cidr_range", _q("10.10.0.0/24")),
            _Attr("region", "var.region"),
            _Attr("network", "google_compute_network.vpc.id"),
            None,
            _block(
                "secondary_ip_range",
                _Attr("range_name", _q("services-range")),
                _Attr("ip_cidr_range", _q("192.168.1.0/24")),
            ),
            None,
            _block(
                "secondary_ip_range",
                _Attr("range_name", _q("pod-ranges")),
                _Attr("ip_cidr_range", _q("192.168.64.0/22")),
            ),
        ),
        _Comment("Service Account for GKE nodes"),
        _resource(
            "google_service_account", "gke_node",
            _Attr("account_id", _env("-gke-node-sa")),
            _Attr("display_name", _q("GKE Node Service Account")),
        ),
        _Comment("IAM bindings for the service account"),
        _resource(
            "google_project_iam_member", "gke_node",
            _Attr("for_each", _multiline_list("toset([", _NODE_ROLES, "])")),
            None,
            _Attr("role", "each.value"),
            _Attr("member", _q("serviceAccount:${google_service_account.gke_node.email}")),
        ),
        _Comment("Outputs"),
        _output(
            "kubernetes_cluster_name",
            _Attr("value", "google_container_cluster.primary.name"),
            _Attr("description", _q("GKE Cluster Name")),
        ),
        _output(
            "kubernetes_cluster_host",
            _Attr("value", "google_container_cluster.primary.endpoint"),
            _Attr("description", _q("GKE Cluster Host")),
            _Attr("sensitive", "true"),
        ),
    )


_TEMPLATES: dict[str, str] = {
    "aws-vpc": _aws_vpc(),
    "aws-web-app": _aws_web_app(),
    "gcp-gke": _gcp_gke(),
}


def template_names() -> tuple[str, ...]:
    """Return the names of the built-in templates."""
    return tuple(_TEMPLATES)


def get_template(name: str) -> str:
    """Return the template text; raise KeyError for an unknown name."""
    try:
        return _TEMPLATES[name]
    except KeyError:
        raise KeyError(f"unknown template: {name}") from None