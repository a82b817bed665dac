import pytest
from lxml import etree

from ocs_client import OCSClient
from ocs_client.soap import SOAP_ENV

BASE_URL = "http://ocs.example.com"
ENDPOINT = f"{BASE_URL}/ocsinterface"
NAMESPACE = f"{BASE_URL}/Apache/Ocsinventory/Interface"


def soap_success(fragments):
    """Build the envelope the OCS server sends back for get_computers_V1."""
    envelope = etree.Element(f"{{{SOAP_ENV}}}Envelope", nsmap={"soap": SOAP_ENV})
    body = etree.SubElement(envelope, f"{{{SOAP_ENV}}}Body")
    response = etree.SubElement(
        body, f"{{{NAMESPACE}}}get_computers_V1Response", nsmap={None: NAMESPACE}
    )
    for index, fragment in enumerate(fragments, start=1):
        param = etree.SubElement(response, f"{{{NAMESPACE}}}s-gensym{index}")
        param.text = fragment
    return etree.tostring(envelope, xml_declaration=True, encoding="UTF-8")


def soap_fault(faultstring, faultcode="soap:Server"):
    envelope = etree.Element(f"{{{SOAP_ENV}}}Envelope", nsmap={"soap": SOAP_ENV})
    body = etree.SubElement(envelope, f"{{{SOAP_ENV}}}Body")
    fault = etree.SubElement(body, f"{{{SOAP_ENV}}}Fault")
    etree.SubElement(fault, "faultcode").text = faultcode
    etree.SubElement(fault, "faultstring").text = faultstring
    return etree.tostring(envelope, xml_declaration=True, encoding="UTF-8")


def computers_payload(*computers):
    return soap_success(["<COMPUTERS>", *computers, "</COMPUTERS>"])


def request_xml(last_request):
    """Extract the <REQUEST> string posted in a SOAP envelope."""
    envelope = etree.fromstring(last_request.body)
    (param,) = envelope.iter("c-gensym1")
    return param.text


COMPUTER_PC042 = """<COMPUTER>
  <HARDWARE>
    <ID>42</ID>
    <NAME>PC-042</NAME>
    <WORKGROUP>CORP</WORKGROUP>
    <OSNAME>Microsoft Windows 10 Pro</OSNAME>
    <IPADDR>10.0.0.42</IPADDR>
    <LASTDATE>2024-03-01 10:00:00</LASTDATE>
    <DESCRIPTION>x86 64 bit/03-01-24 10:00:00</DESCRIPTION>
  </HARDWARE>
  <DRIVES>
    <LETTER>C:/</LETTER>
    <VOLUMN>System</VOLUMN>
    <TYPE>Hard Drive</TYPE>
    <FREE>1024</FREE>
  </DRIVES>
  <SOFTWARES>
    <NAME>Firefox</NAME>
    <VERSION>115.0</VERSION>
  </SOFTWARES>
  <SOFTWARES>
    <NAME>7-Zip</NAME>
    <VERSION>23.01</VERSION>
  </SOFTWARES>
</COMPUTER>"""

COMPUTER_PC043 = """<COMPUTER>
  <HARDWARE>
    <ID>43</ID>
    <NAME>PC-043</NAME>
  </HARDWARE>
</COMPUTER>"""


@pytest.fixture
def client():
    ocs = OCSClient(BASE_URL, "user", "secret")
    yield ocs
    ocs.close()
