# limeai/fallback/catalog.py
# Pre-built Mermaid flowcharts served when the upstream model is skipped or fails.
from types import MappingProxyType

DEFAULT_KEY = "default"

_FLOWCHARTS: dict[str, str] = {
    DEFAULT_KEY: """graph TD
    A[Start] --> B{Do you understand the concept?}
    B -->|Yes| C[Great! You're ready to proceed]
    B -->|No| D[Break it down into smaller parts]
    D --> E[Study each part separately]
    E --> F[Connect the concepts together]
    F --> B""",
    "computer boot": """graph TD
    A[Power On] --> B[BIOS/UEFI Loads]
    B --> C[POST Process Checks Hardware]
    C --> D[Boot Device Located]
    D --> E[Boot Loader Runs]
    E --> F[Operating System Kernel Loads]
    F --> G[System Initialization]
    G --> H[User Login Screen]""",
    "http request": """graph TD
    A[User Enters URL] --> B[Browser Looks Up DNS]
    B --> C[Browser Establishes TCP Connection]
    C --> D[Browser Sends HTTP Request]
    D --> E[Server Processes Request]
    E --> F[Server Sends Response]
    F --> G[Browser Renders Page]""",
    "react rendering": """graph TD
    A[Component Rendered] --> B{State or Props Changed?}
    B -->|Yes| C[Virtual DOM Updated]
    B -->|No| D[No Re-render Needed]
    C --> E[Diff Algorithm Compares with Real DOM]
    E --> F[Only Changed Elements Updated in Real DOM]""",
    "algorithm": """graph TD
    A[Problem Definition] --> B[Design Algorithm]
    B --> C[Implement Code]
    C --> D[Test with Sample Data]
    D --> E{Passes All Tests?}
    E -->|No| F[Debug and Fix]
    F --> C
    E -->|Yes| G[Optimize if Needed]
    G --> H[Final Solution]""",
    "javascript": """graph TD
    A[JavaScript Code] --> B[JavaScript Engine]
    B --> C[Parser]
    C --> D[Abstract Syntax Tree]
    D --> E[Interpreter]
    E --> F[Bytecode]
    F --> G[Execution]
    G --> H{Performance Critical?}
    H -->|Yes| I[JIT Compiler]
    I --> J[Optimized Machine Code]
    H -->|No| K[Continue Interpreting]""",
    "machine learning": """graph TD
    A[Collect Data] --> B[Preprocess Data]
    B --> C[Split into Training/Testing Sets]
    C --> D[Choose Model]
    D --> E[Train Model]
    E --> F[Evaluate Model]
    F --> G{Performance Satisfactory?}
    G -->|No| H[Tune Hyperparameters]
    H --> E
    G -->|Yes| I[Deploy Model]""",
    "git": """graph TD
    A[Working Directory] -->|git add| B[Staging Area]
    B -->|git commit| C[Local Repository]
    C -->|git push| D[Remote Repository]
    D -->|git fetch| E[Track Remote]
    E -->|git merge| C
    D -->|git pull| C""",
    "database": """graph TD
    A[User Request] --> B[Application Server]
    B --> C[Database Connection Pool]
    C --> D[Execute Query]
    D --> E{Query Type?}
    E -->|SELECT| F[Retrieve Data]
    E -->|INSERT/UPDATE/DELETE| G[Modify Data]
    F --> H[Return Result Set]
    G --> I[Return Status]""",
    "python": """graph TD
    A[Python Code] --> B[Python Interpreter]
    B --> C[Bytecode Compilation]
    C --> D[Python Virtual Machine]
    D --> E[Execution]""",
    "web": """graph TD
    A[User Opens Browser] --> B[User Enters URL]
    B --> C[DNS Lookup]
    C --> D[HTTP Request]
    D --> E[Server Processing]
    E --> F[Response]
    F --> G[Browser Rendering]""",
    "cloud": """graph TD
    A[Application] --> B[Cloud Provider]
    B --> C{Service Type}
    C -->|Infrastructure| D[Virtual Machines/Storage]
    C -->|Platform| E[Managed Services]
    C -->|Software| F[Ready-to-use Applications]""",
    "security": """graph TD
    A[Data] --> B{Security Controls}
    B --> C[Authentication]
    B --> D[Authorization]
    B --> E[Encryption]
    B --> F[Monitoring]
    B --> G[Backup]""",
}

# Read-only for the life of the process; iteration order is the tie-break order.
FLOWCHART_CATALOG = MappingProxyType(_FLOWCHARTS)
