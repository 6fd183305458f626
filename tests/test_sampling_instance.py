"""Tests for the forwarding-options sampling instance resource"""

import unittest

from junos_provider.resources.base import ConfigSetError, data_from_dict
from junos_provider.resources.forwardingoptions_sampling_instance import (
    FlowServer,
    ForwardingoptionsSamplingInstance,
    Inet6Output,
    InetFlowServer,
    InetOutput,
    MplsOutput,
    OutputInterface,
    SamplingInput,
    SamplingInstanceData,
)
from junos_provider.utils.error_handling import ValidationError
from tests.fakes import fake_session

PREFIX = 'set forwarding-options sampling instance "s1" '


class TestSamplingInstance(unittest.TestCase):

    def setUp(self):
        self.resource = ForwardingoptionsSamplingInstance()

    def instance_data(self):
        return SamplingInstanceData(
            name="s1",
            family_inet_input=SamplingInput(rate=100),
            family_inet_output=InetOutput(
                flow_server=[InetFlowServer(hostname="192.0.2.1", port=2055, version=5)],
                interface=[OutputInterface(name="sp-0/0/0", source_address="192.0.2.2")],
            ),
        )

    def test_set_lines(self):
        session = fake_session()
        self.resource.set(session, self.instance_data())
        self.assertEqual(session.loaded, [
            PREFIX + "family inet input rate 100",
            PREFIX + "family inet output flow-server 192.0.2.1 port 2055",
            PREFIX + "family inet output flow-server 192.0.2.1 version 5",
            PREFIX + "family inet output interface sp-0/0/0",
            PREFIX + "family inet output interface sp-0/0/0 source-address 192.0.2.2",
        ])

    def test_set_in_routing_instance(self):
        session = fake_session()
        self.resource.set(session, SamplingInstanceData(
            name="s1",
            routing_instance="ri1",
            disable=True,
            input=SamplingInput(run_length=2),
            family_mpls_output=MplsOutput(inline_jflow_export_rate=10, inline_jflow_source_address="192.0.2.3"),
            family_inet6_output=Inet6Output(extension_service=["svc1"], flow_active_timeout=60),
        ))
        prefix = 'set routing-instances ri1 forwarding-options sampling instance "s1" '
        self.assertEqual(session.loaded, [
            prefix + "disable",
            prefix + 'family inet6 output extension-service "svc1"',
            prefix + "family inet6 output flow-active-timeout 60",
            prefix + "family mpls output inline-jflow flow-export-rate 10",
            prefix + "family mpls output inline-jflow source-address 192.0.2.3",
            prefix + "input run-length 2",
        ])

    def test_set_flow_server_options(self):
        server = FlowServer(
            hostname="collector",
            port=4739,
            aggregation_source_destination_prefix=True,
            aggregation_source_destination_prefix_caida_compliant=True,
            forwarding_class="fc1",
            version9_template="t9",
        )
        self.assertEqual(server.config_set("p "), [
            "p flow-server collector port 4739",
            "p flow-server collector aggregation source-destination-prefix",
            "p flow-server collector aggregation source-destination-prefix caida-compliant",
            'p flow-server collector forwarding-class "fc1"',
            'p flow-server collector version9 template "t9"',
        ])

    def test_set_rejects_caida_without_prefix_aggregation(self):
        server = FlowServer(hostname="collector", port=4739,
                            aggregation_source_destination_prefix_caida_compliant=True)
        with self.assertRaises(ConfigSetError):
            server.config_set("p ")

    def test_set_rejects_duplicate_flow_servers(self):
        data = self.instance_data()
        data.family_inet_output.flow_server.append(InetFlowServer(hostname="192.0.2.1", port=2056))
        with self.assertRaises(ConfigSetError):
            self.resource.set(fake_session(), data)

    def test_set_rejects_empty_block(self):
        data = self.instance_data()
        data.family_mpls_input = SamplingInput()
        with self.assertRaises(ConfigSetError):
            self.resource.set(fake_session(), data)

    def test_read(self):
        session = fake_session({
            'show configuration forwarding-options sampling instance "s1" | display set relative': (
                "set disable\n"
                "set input run-length 2\n"
                "set family inet input rate 100\n"
                "set family inet output flow-server 192.0.2.1 port 2055\n"
                "set family inet output flow-server 192.0.2.1 version 5\n"
                "set family inet output flow-server 192.0.2.1 aggregation protocol-port\n"
                "set family inet output interface sp-0/0/0\n"
                "set family inet output interface sp-0/0/0 source-address 192.0.2.2\n"
                "set family inet6 output extension-service \"svc1\"\n"
                "set family mpls output flow-server 192.0.2.9 port 9995\n"
            ),
        })
        data = self.resource.read(session, "s1", "default")

        self.assertEqual(data.id, "s1_-_default")
        self.assertTrue(data.disable)
        self.assertEqual(data.input, SamplingInput(run_length=2))
        self.assertEqual(data.family_inet_input, SamplingInput(rate=100))
        self.assertIsInstance(data.family_inet_output, InetOutput)
        self.assertEqual(data.family_inet_output.flow_server, [InetFlowServer(
            hostname="192.0.2.1", port=2055, version=5, aggregation_protocol_port=True,
        )])
        self.assertEqual(data.family_inet_output.interface,
                         [OutputInterface(name="sp-0/0/0", source_address="192.0.2.2")])
        self.assertEqual(data.family_inet6_output.extension_service, ["svc1"])
        self.assertEqual(data.family_mpls_output.flow_server, [FlowServer(hostname="192.0.2.9", port=9995)])
        self.assertIsNone(data.family_inet6_input)

    def test_validate(self):
        self.assertEqual(self.resource.validate(self.instance_data()), [])

        issues = self.resource.validate(SamplingInstanceData(name="s1"))
        self.assertIn(
            "one of input, family_inet_input, family_inet6_input or family_mpls_input must be specified",
            issues,
        )
        self.assertIn(
            "one of family_inet_output, family_inet6_output or family_mpls_output must be specified",
            issues,
        )

    def test_validate_input_conflicts(self):
        data = self.instance_data()
        data.input = SamplingInput(rate=1)
        issues = self.resource.validate(data)
        self.assertIn("cannot set family_inet_input block if input block is used", issues)

    def test_validate_output_block(self):
        data = self.instance_data()
        output = data.family_inet_output
        output.inline_jflow_export_rate = 10
        output.flow_server.append(InetFlowServer(hostname="192.0.2.1", version=9, local_dump=True,
                                                 no_local_dump=True))
        issues = self.resource.validate(data)
        self.assertIn(
            "inline_jflow_source_address must be specified with inline_jflow_export_rate "
            "in family_inet_output block",
            issues,
        )
        self.assertIn('multiple blocks flow_server with the same hostname "192.0.2.1"', issues)
        self.assertIn('port must be specified on flow-server "192.0.2.1" in family_inet_output block', issues)
        self.assertIn("version must be one of 5, 8, got 9", issues)
        self.assertIn(
            'local_dump and no_local_dump cannot be configured together '
            'in flow-server "192.0.2.1" in family_inet_output block',
            issues,
        )

    def test_manifest_mapping_builds_family_classes(self):
        data = self.resource.new_data({
            "name": "s1",
            "family_inet_input": {"rate": 1},
            "family_inet_output": {"flow_server": [{"hostname": "h1", "port": 2055, "version": 8}]},
        })
        self.assertIsInstance(data.family_inet_output.flow_server[0], InetFlowServer)
        self.assertEqual(data.family_inet_output.flow_server[0].version, 8)
        self.assertEqual(data.routing_instance, "default")

    def test_version_only_on_inet(self):
        with self.assertRaises(ValidationError):
            data_from_dict(SamplingInstanceData, {
                "name": "s1",
                "family_mpls_output": {"flow_server": [{"hostname": "h1", "port": 1, "version": 5}]},
            })


if __name__ == '__main__':
    unittest.main()
