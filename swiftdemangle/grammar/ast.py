# swiftdemangle/grammar/ast.py
"""Demangle Tree
- Kind    : 문법 생산(production) 하나를 가리키는 닫힌 태그
- Contents: 없음 | 이름 문자열(str) | 정수 인덱스(int)  — 잎(leaf) 성격의 노드만 채운다
- Node    : Kind + Contents + 순서 있는 자식 리스트

트리는 한 번의 parse 호출 안에서 아래에서 위로 만들어지고, 반환된 뒤에는 **읽기 전용**이다.
역참조(substitution)는 같은 노드 객체를 공유할 뿐 다시 수정하지 않으므로 순환이 생기지 않는다.
"""

from __future__     import annotations
from dataclasses    import dataclass, field
from enum           import Enum
from typing         import Dict, Iterator, List, Optional, Tuple, Union

from .errors import MalformedInput

Contents = Union[None, str, int]

# ---- Kind 목록 (표시 이름 그대로; 멤버 이름은 UPPER_SNAKE) ----
_KIND_NAMES = """
Allocator AnonymousContext AnonymousDescriptor ArgumentTuple AssocTypePath AssociatedConformanceDescriptor
AssociatedType AssociatedTypeDescriptor AssociatedTypeGenericParamRef AssociatedTypeMetadataAccessor
AssociatedTypeRef AssociatedTypeWitnessTableAccessor AsyncAnnotation AsyncAwaitResumePartialFunction
AsyncFunctionPointer AsyncSuspendResumePartialFunction AutoClosureType BaseConformanceDescriptor
BaseWitnessTableAccessor BoundGenericClass BoundGenericEnum BoundGenericFunction BoundGenericOtherNominalType
BoundGenericProtocol BoundGenericStructure BoundGenericTypeAlias BuiltinTypeName CFunctionPointer Class
ClassMetadataBaseOffset ConcreteProtocolConformance ConcurrentFunctionType Constructor CurryThunk Deallocator
DeclContext DefaultArgumentInitializer DefaultAssociatedConformanceAccessor DefaultAssociatedTypeMetadataAccessor
DependentAssociatedConformance DependentAssociatedTypeRef DependentGenericConformanceRequirement
DependentGenericLayoutRequirement DependentGenericParamCount DependentGenericParamType
DependentGenericSameTypeRequirement DependentGenericSignature DependentGenericType DependentMemberType
DependentProtocolConformanceAssociated DependentProtocolConformanceInherited DependentProtocolConformanceRoot
DependentPseudogenericSignature Destructor DidSet DirectMethodReferenceAttribute Directness DispatchThunk
DynamicAttribute DynamicSelf DynamicallyReplaceableFunctionImpl DynamicallyReplaceableFunctionKey
DynamicallyReplaceableFunctionVar EmptyList Enum EnumCase ErrorType EscapingAutoClosureType EscapingObjCBlock
ExistentialMetatype ExplicitClosure Extension ExtensionDescriptor FieldOffset FirstElementMarker FullTypeMetadata
Function FunctionSignatureSpecialization FunctionType GenericPartialSpecialization
GenericPartialSpecializationNotReAbstracted GenericProtocolWitnessTable
GenericProtocolWitnessTableInstantiationFunction GenericSpecialization GenericSpecializationInResilienceDomain
GenericSpecializationNotReAbstracted GenericSpecializationParam GenericSpecializationPrespecialized
GenericTypeMetadataPattern GenericTypeParamDecl Getter Global GlobalGetter Identifier ImplConvention
ImplErrorResult ImplEscaping ImplFunctionAttribute ImplFunctionType ImplParameter ImplResult ImplicitClosure
Index InOut InfixOperator Initializer InlinedGenericFunction IsSerialized IVarDestroyer IVarInitializer
KeyPathEqualsThunkHelper KeyPathGetterThunkHelper KeyPathHashThunkHelper KeyPathSetterThunkHelper LabelList
LazyProtocolWitnessTableAccessor LazyProtocolWitnessTableCacheVariable LocalDeclName MaterializeForSet
MergedFunction Metaclass Metatype MetatypeRepresentation MethodDescriptor MethodLookupFunction ModifyAccessor
Module ModuleDescriptor NativeOwningAddressor NativeOwningMutableAddressor NativePinningAddressor
NativePinningMutableAddressor NoEscapeFunctionType NominalTypeDescriptor NonObjCAttribute Number
ObjCAttribute ObjCBlock ObjCMetadataUpdateFunction OpaqueReturnType OpaqueReturnTypeOf OpaqueType
OpaqueTypeDescriptor OpaqueTypeDescriptorAccessor OtherNominalType OutlinedAssignWithCopy OutlinedAssignWithTake
OutlinedBridgedMethod OutlinedConsume OutlinedCopy OutlinedDestroy OutlinedInitializeWithCopy
OutlinedInitializeWithTake OutlinedRelease OutlinedRetain OutlinedVariable Owned OwningAddressor
OwningMutableAddressor PartialApplyForwarder PartialApplyObjCForwarder PostfixOperator PrefixOperator
PrivateDeclName PropertyDescriptor Protocol ProtocolConformance ProtocolConformanceDescriptor
ProtocolConformanceRefInOtherModule ProtocolConformanceRefInProtocolModule ProtocolConformanceRefInTypeModule
ProtocolDescriptor ProtocolList ProtocolListWithAnyObject ProtocolListWithClass
ProtocolRequirementsBaseDescriptor ProtocolSelfConformanceDescriptor ProtocolWitness ProtocolWitnessTable
ProtocolWitnessTableAccessor ProtocolWitnessTablePattern ReabstractionThunk ReabstractionThunkHelper
ReadAccessor RelatedEntityDeclName ResilientProtocolWitnessTable RetroactiveConformance ReturnType
SILBoxType Setter Shared SpecializationPassID Static Structure Subscript Suffix SugaredArray
SugaredDictionary SugaredOptional SugaredParen ThinFunctionType ThrowsAnnotation Tuple TupleElement
TupleElementName Type TypeAlias TypeList TypeMangling TypeMetadata TypeMetadataAccessFunction
TypeMetadataCompletionFunction TypeMetadataInstantiationCache TypeMetadataInstantiationFunction
TypeMetadataLazyCache TypeMetadataSingletonInitializationCache UncurriedFunctionType UnknownIndex Unmanaged
Unowned UnsafeAddressor UnsafeMutableAddressor VTableAttribute VTableThunk ValueWitness ValueWitnessTable
Variable VariadicMarker Weak WillSet
Archetype ArchetypeRef FunctionSignatureSpecializationParam FunctionSignatureSpecializationParamKind
FunctionSignatureSpecializationParamPayload FunctionSignatureSpecializationReturn GenericType
GlobalActorFunctionType ProtocolSelfConformanceWitness QualifiedArchetype SelfTypeRef
"""


def _upper_snake(name: str) -> str:
    out: List[str] = []
    for i, c in enumerate(name):
        if c.isupper() and i > 0 and (name[i - 1].islower() or (i + 1 < len(name) and name[i + 1].islower())):
            out.append("_")
        out.append(c.upper())
    return "".join(out)


# Kind.BOUND_GENERIC_CLASS.value == "BoundGenericClass"
Kind = Enum("Kind", [(_upper_snake(n), n) for n in _KIND_NAMES.split()], module=__name__)
Kind.__doc__ = "문법 생산을 가리키는 닫힌 태그. value는 표시용 CamelCase 이름."


# ---- 종류별 자식 수 (최소, 최대). 표에 없는 Kind는 가변 ----
_ANY = 1 << 30
ARITY: Dict["Kind", Tuple[int, int]] = {
    Kind.TYPE: (1, 1),
    Kind.TYPE_MANGLING: (1, 1),
    Kind.TYPE_METADATA: (1, 1),
    Kind.TYPE_METADATA_ACCESS_FUNCTION: (1, 1),
    Kind.NOMINAL_TYPE_DESCRIPTOR: (1, 1),
    Kind.STATIC: (1, 1),
    Kind.IN_OUT: (1, 1),
    Kind.SHARED: (1, 1),
    Kind.OWNED: (1, 1),
    Kind.WEAK: (1, 1),
    Kind.UNOWNED: (1, 1),
    Kind.UNMANAGED: (1, 1),
    Kind.RETURN_TYPE: (1, 1),
    Kind.ARGUMENT_TUPLE: (1, 1),
    Kind.CLASS: (2, 2),
    Kind.STRUCTURE: (2, 2),
    Kind.ENUM: (2, 2),
    Kind.PROTOCOL: (2, 2),
    Kind.TYPE_ALIAS: (2, 2),
    Kind.OTHER_NOMINAL_TYPE: (2, 2),
    Kind.BOUND_GENERIC_CLASS: (2, 2),
    Kind.BOUND_GENERIC_STRUCTURE: (2, 2),
    Kind.BOUND_GENERIC_ENUM: (2, 2),
    Kind.BOUND_GENERIC_PROTOCOL: (2, 2),
    Kind.BOUND_GENERIC_TYPE_ALIAS: (2, 2),
    Kind.BOUND_GENERIC_OTHER_NOMINAL_TYPE: (2, 2),
    Kind.BOUND_GENERIC_FUNCTION: (2, 2),
    Kind.DEPENDENT_GENERIC_PARAM_TYPE: (2, 2),
    Kind.DEPENDENT_MEMBER_TYPE: (2, 2),
    Kind.DEPENDENT_GENERIC_TYPE: (2, 2),
    Kind.DEPENDENT_GENERIC_CONFORMANCE_REQUIREMENT: (2, 2),
    Kind.DEPENDENT_GENERIC_SAME_TYPE_REQUIREMENT: (2, 2),
    Kind.DEPENDENT_GENERIC_LAYOUT_REQUIREMENT: (2, 4),
    Kind.EXTENSION: (2, 3),
    Kind.PRIVATE_DECL_NAME: (1, 2),
    Kind.LOCAL_DECL_NAME: (2, 2),
    Kind.FUNCTION: (2, 4),
    Kind.VARIABLE: (2, 4),
    Kind.SUBSCRIPT: (2, 4),
    Kind.CONSTRUCTOR: (1, 4),
    Kind.ALLOCATOR: (1, 4),
    Kind.DESTRUCTOR: (1, 1),
    Kind.DEALLOCATOR: (1, 1),
    Kind.FUNCTION_TYPE: (2, 6),
    Kind.NO_ESCAPE_FUNCTION_TYPE: (2, 6),
    Kind.PROTOCOL_CONFORMANCE: (3, 4),
    Kind.PROTOCOL_WITNESS: (2, 2),
    Kind.METATYPE: (1, 2),
    Kind.EXISTENTIAL_METATYPE: (1, 2),
    Kind.TUPLE_ELEMENT: (1, 3),
    Kind.VALUE_WITNESS: (2, 2),
    Kind.GLOBAL: (1, _ANY),
}


def check_arity(kind: "Kind", n: int) -> bool:
    lo, hi = ARITY.get(kind, (0, _ANY))
    return lo <= n <= hi


@dataclass
class Node:
    """
    Node
    ====
    디맹글 트리의 단위.

    Fields
    ------
    kind     : Kind
    contents : None | str | int
    children : 소유하는 자식 노드 리스트(순서 유지)
    depth    : 이 노드를 뿌리로 하는 트리 높이(비교/출력에서 제외)
    """
    kind: "Kind"
    contents: Contents = None
    children: List["Node"] = field(default_factory=list)
    depth: int = field(default=1, compare=False, repr=False)

    def __post_init__(self) -> None:
        self.children = list(self.children)
        if self.children and not check_arity(self.kind, len(self.children)):
            raise MalformedInput(f"{self.kind.value} cannot have {len(self.children)} children")
        self.depth = 1 + max((c.depth for c in self.children), default=0)

    # ---- 구성(파서 전용) ----

    def add_child(self, child: "Node") -> "Node":
        lo, hi = ARITY.get(self.kind, (0, _ANY))
        if len(self.children) >= hi:
            raise MalformedInput(f"{self.kind.value} cannot have more than {hi} children")
        self.children.append(child)
        if child.depth + 1 > self.depth:
            self.depth = child.depth + 1
        return self

    def reverse_children(self, start: int = 0) -> None:
        if start < len(self.children):
            self.children[start:] = self.children[start:][::-1]

    # ---- 조회 ----

    @property
    def text(self) -> str:
        return self.contents if isinstance(self.contents, str) else ""

    @property
    def index(self) -> Optional[int]:
        return self.contents if isinstance(self.contents, int) else None

    @property
    def has_text(self) -> bool:
        return isinstance(self.contents, str)

    @property
    def has_index(self) -> bool:
        return isinstance(self.contents, int)

    def __len__(self) -> int:
        return len(self.children)

    def __iter__(self) -> Iterator["Node"]:
        return iter(self.children)

    def __getitem__(self, i: int) -> "Node":
        return self.children[i]

    def child(self, i: int) -> Optional["Node"]:
        return self.children[i] if -len(self.children) <= i < len(self.children) else None

    @property
    def first(self) -> Optional["Node"]:
        return self.children[0] if self.children else None

    def __hash__(self) -> int:
        return hash((self.kind, self.contents, len(self.children)))

    # ---- 출력 ----

    def dump(self, indent: int = 0) -> str:
        """디버그용 트리 덤프: `Kind ["name" | 3]` 한 줄씩, 자식은 2칸 들여쓰기"""
        pad = "  " * indent
        if isinstance(self.contents, str):
            head = f"{pad}{self.kind.value} {self.contents!r}"
        elif isinstance(self.contents, int):
            head = f"{pad}{self.kind.value} {self.contents}"
        else:
            head = f"{pad}{self.kind.value}"
        return "\n".join([head] + [c.dump(indent + 1) for c in self.children])

    def print(self, options=None) -> str:
        from ..codegen.printer import print_node
        from ..codegen.options import PrintOptions
        return print_node(self, PrintOptions.DEFAULT if options is None else options)

    def __str__(self) -> str:
        return self.print()


def node(kind: "Kind", contents: Contents = None, *children: Node) -> Node:
    return Node(kind, contents, list(children))
